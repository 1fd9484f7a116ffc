"""
Backend package for the ResearchLens Regulatory web application.

This package exposes a FastAPI application that reuses the `researchlens`
analyzer, feed, alert and compliance modules to serve the dashboard over HTTP.
"""
