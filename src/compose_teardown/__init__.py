"""
Compose Teardown - reconcile a multi-container compose project to empty.

Discovers every container, network, volume and image that belongs to a
compose project and removes them in an order the container runtime accepts,
collecting per-resource failures instead of stopping at the first one.
"""

__version__ = "1.0.0"

from .models import DownOptions, ImagePolicy  # noqa: E402
from .services.teardown_orchestrator import TeardownOrchestrator, down  # noqa: E402

__all__ = ["DownOptions", "ImagePolicy", "TeardownOrchestrator", "down"]
