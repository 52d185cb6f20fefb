"""
Utility modules for the MTSS planner.
"""

from .llm import (
    LLMClient,
    LLMProvider,
    LLMRequest,
    LLMResponse,
    LLMError,
    APIError,
    RateLimitError,
    ValidationError,
    create_llm_client,
)

__all__ = [
    'LLMClient',
    'LLMProvider',
    'LLMRequest',
    'LLMResponse',
    'LLMError',
    'APIError',
    'RateLimitError',
    'ValidationError',
    'create_llm_client',
]
