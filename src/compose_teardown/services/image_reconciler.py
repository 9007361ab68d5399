"""Removal of resolved image targets.

An image that no longer exists is already in the desired state: a shared
image may have been deleted by an earlier target or by another teardown.
"""

import logging
from typing import Iterable, List

from ..errors import ResourceNotFoundError
from ..models import FailureStage, ImageTarget, ResourceKind
from .parallel_executor import ParallelExecutor
from .runtime_client import RuntimeClient
from .teardown_result import TeardownResult

logger = logging.getLogger(__name__)


class ImageReconciler:
    def __init__(self, client: RuntimeClient, executor: ParallelExecutor):
        self.client = client
        self.executor = executor

    def reconcile(self, targets: Iterable[ImageTarget], result: TeardownResult) -> None:
        """Remove each distinct image reference once."""
        unique: List[ImageTarget] = []
        seen = set()
        for target in targets:
            if target.reference not in seen:
                seen.add(target.reference)
                unique.append(target)

        outcomes = self.executor.map(
            lambda target: self.client.remove_image(target.reference), unique
        )
        for outcome in outcomes:
            reference = outcome.item.reference
            if outcome.cancelled:
                result.record_skipped(ResourceKind.IMAGE, reference)
            elif isinstance(outcome.error, ResourceNotFoundError):
                logger.debug(f"Image {reference} already removed")
                result.record_absent(ResourceKind.IMAGE, reference)
            elif outcome.error is not None:
                logger.warning(f"Failed to remove image {reference}: {outcome.error}")
                result.record_failure(
                    ResourceKind.IMAGE, reference, FailureStage.REMOVE, outcome.error
                )
            else:
                logger.debug(
                    f"Removed image {reference} ({outcome.item.policy.value} policy)"
                )
                result.record_removed(ResourceKind.IMAGE, reference)
