"""
AI Cost Estimator
=================
Token counting, model catalog and cost estimation service for LLM APIs.
"""

__version__ = "1.0.0"
