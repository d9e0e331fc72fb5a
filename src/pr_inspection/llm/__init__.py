"""
LLM Review Requests

This module provides prompt construction, the structured review tool
schema and the chat completions client used to request file reviews.
"""

from .prompts import PromptBuilder, estimate_tokens
from .client import ChatCompletionsClient, ModelClient, ModelClientError
from .schema import REVIEW_TOOL

__all__ = ['PromptBuilder', 'estimate_tokens', 'ChatCompletionsClient', 'ModelClient', 'ModelClientError', 'REVIEW_TOOL']
