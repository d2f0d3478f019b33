"""
Normalization and ranking.

Turns provider records into the common schema and orders them
deterministically.
"""

from .normalizer import normalize_record, normalize_records
from .record_ranker import RecordRanker, relevance_score

__all__ = ["RecordRanker", "normalize_record", "normalize_records", "relevance_score"]
