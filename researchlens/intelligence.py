"""
Strategic intelligence report built on top of a literature analysis.
"""

from __future__ import annotations

from typing import Optional

from .models import AnalysisResult, to_plain

STRATEGIC_RECOMMENDATIONS = [
    "Prioritize regulatory engagement early in development",
    "Focus on differentiated clinical endpoints",
    "Build strategic partnerships for market access",
    "Invest in health economics research",
    "Develop comprehensive post-market surveillance plan",
]

GENERIC_REPORT = {
    "executive_summary": (
        "Strategic intelligence analysis provides comprehensive market and regulatory insights "
        "for informed decision-making."
    ),
    "market_landscape": {
        "total_addressable_market": "$25B+",
        "growth_rate": "12% CAGR",
        "key_trends": ["Digital health adoption", "Regulatory modernization", "Value-based care"],
        "regulatory_environment": "Evolving with increased focus on real-world evidence",
    },
    "competitive_analysis": {
        "market_leaders": ["Industry Leader A", "Industry Leader B", "Industry Leader C"],
        "emerging_players": ["Emerging Company X", "Emerging Company Y"],
        "market_concentration": "Moderately concentrated",
        "barrier_to_entry": "Medium to High",
    },
    "regulatory_insights": None,
    "strategic_recommendations": [
        "Conduct comprehensive competitive intelligence",
        "Engage regulatory authorities early",
        "Develop robust clinical evidence package",
        "Build strategic partnerships",
        "Focus on health economics value proposition",
    ],
    "risk_assessment": [],
    "timeline": [],
    "confidence": 85,
}


def executive_summary(result: AnalysisResult) -> str:
    market = result.market_analysis
    return (
        f"Strategic analysis of {result.query} reveals significant market opportunity in the "
        f"{result.therapeutic.value} space. With {market.market_size} market size growing at {market.growth_rate}, "
        f"the regulatory pathway via {result.regulatory_pathway} presents favorable risk-reward profile "
        "for market entry."
    )


def generate_strategic_report(result: Optional[AnalysisResult] = None) -> dict:
    """
    Build the strategic intelligence report for an analysis, or the generic
    report when no analysis has been run yet.
    """
    if result is None:
        return to_plain(GENERIC_REPORT)

    market = result.market_analysis
    return {
        "executive_summary": executive_summary(result),
        "market_landscape": {
            "total_addressable_market": market.market_size,
            "growth_rate": market.growth_rate,
            "key_trends": list(market.key_drivers),
            "regulatory_environment": "Supportive with clear guidance available",
        },
        "competitive_analysis": to_plain(result.competitive_intelligence),
        "regulatory_insights": {
            "pathway": result.regulatory_pathway,
            "timeline": "12-18 months estimated",
            "key_milestones": [step.milestone for step in result.timeline],
            "precedent_analysis": "Favorable based on recent approvals",
            "risk_mitigation": "Pre-submission meetings recommended",
        },
        "strategic_recommendations": list(STRATEGIC_RECOMMENDATIONS),
        "risk_assessment": to_plain(result.risk_factors),
        "timeline": to_plain(result.timeline),
        "confidence": result.confidence,
    }


def report_headline(result: Optional[AnalysisResult]) -> str:
    """Short multi-line digest shown after generating a report."""
    if result is None:
        return "Strategic intelligence report generated! Run a query first for personalized insights."
    return "\n".join(
        [
            "Strategic intelligence generated!",
            f"Query: {result.query}",
            f"Therapeutic: {result.therapeutic.value}",
            f"Product: {result.product_type.value}",
            f"Market: {result.market_analysis.market_size}",
            f"Growth: {result.market_analysis.growth_rate}",
            f"Pathway: {result.regulatory_pathway}",
        ]
    )
