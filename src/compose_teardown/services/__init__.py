"""Teardown services: discovery, classification, sequencing and reconcilers."""

from .runtime_client import CliRuntimeClient, RuntimeClient
from .teardown_orchestrator import TeardownOrchestrator
from .teardown_result import ResourceFailure, TeardownResult

__all__ = [
    "CliRuntimeClient",
    "RuntimeClient",
    "TeardownOrchestrator",
    "ResourceFailure",
    "TeardownResult",
]
