"""
Aggregation.

The parallel fan-out orchestrator and the AggregationService entry point.
"""

from .orchestrator import AggregationOrchestrator
from .service import AggregationService, build_cache_key

__all__ = ["AggregationOrchestrator", "AggregationService", "build_cache_key"]
