"""
Content Aggregation Services

This package contains the core Python services:
- providers: Course and job provider adapters with per-provider rate limiting
- ranker: Record normalization and ranking
- analytics: Job-market analytics
- aggregation: Parallel fan-out orchestrator and the AggregationService entry point
- shared: Models, errors, configuration, logging and the tiered cache
"""
