"""
Multi-layer adaptive-threshold expansion search.
"""

from .thresholds import generate_thresholds, threshold_increment
from .time_filter import build_time_range, parse_datetime
from .models import MemoryNode, MemoryTree, SearchConfig
from .aggregator import CandidateAggregator
from .expansion import ExpansionEngine, ExpansionResult
from .rerank_gate import RerankGate
from .service import SearchService

__all__ = [
    "generate_thresholds",
    "threshold_increment",
    "build_time_range",
    "parse_datetime",
    "MemoryNode",
    "MemoryTree",
    "SearchConfig",
    "CandidateAggregator",
    "ExpansionEngine",
    "ExpansionResult",
    "RerankGate",
    "SearchService",
]
