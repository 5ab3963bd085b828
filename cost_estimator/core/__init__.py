"""
Core Business Logic
====================
Document extraction, token counting, pricing reconciliation and cost math.
"""

from cost_estimator.core.extractor import ParsedDocument, extract
from cost_estimator.core.pricing import calculate_cost
from cost_estimator.core.reconciliation import MergeResult, merge_pricing
from cost_estimator.core.tokenizer import TokenCounter, get_token_counter

__all__ = [
    "ParsedDocument",
    "extract",
    "calculate_cost",
    "MergeResult",
    "merge_pricing",
    "TokenCounter",
    "get_token_counter",
]
