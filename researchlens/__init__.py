"""
ResearchLens Regulatory: keyword classification of research queries and
synthetic regulatory-intelligence reports.
"""

from .synthesis import LiteratureAnalyzer, classify, regenerate_studies

__version__ = "0.1.0"

__all__ = ["LiteratureAnalyzer", "classify", "regenerate_studies", "__version__"]
