"""LLM client abstractions and implementations."""

from .llm_client import LLMClient
from .replicate_client import LLMClientError, ReplicateLLMClient
from .contract import InvalidClassification, parse_classification

__all__ = [
    "LLMClient",
    "LLMClientError",
    "ReplicateLLMClient",
    "InvalidClassification",
    "parse_classification",
]
