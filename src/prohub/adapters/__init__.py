"""Adapters - I/O implementations of ports."""

from .claude_cli import ClaudeCLIService
from .http_llm import HTTPLLMService
from .json_workspace import JsonWorkspaceStore
from .llm_oracle import LLMPrioritizationOracle

__all__ = [
    "ClaudeCLIService",
    "HTTPLLMService",
    "JsonWorkspaceStore",
    "LLMPrioritizationOracle",
]
