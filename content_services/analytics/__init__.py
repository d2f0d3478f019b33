"""Job-market analytics over aggregated job records."""

from .market_analyzer import analyze_skill_market, demand_level

__all__ = ["analyze_skill_market", "demand_level"]
