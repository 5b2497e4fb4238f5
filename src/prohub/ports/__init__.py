"""Ports - interfaces/protocols for external dependencies."""

from .llm_service import LLMService
from .prioritization_oracle import PrioritizationOracle
from .workspace_store import WorkspaceStore

__all__ = [
    "LLMService",
    "PrioritizationOracle",
    "WorkspaceStore",
]
