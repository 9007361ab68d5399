"""Removal of named project volumes.

Runs only after every container is removed, so no volume is still mounted.
Removal is forced.
"""

import logging
from typing import Iterable

from ..errors import ResourceNotFoundError
from ..models import FailureStage, ResourceKind, VolumeRecord
from .parallel_executor import ParallelExecutor
from .runtime_client import RuntimeClient
from .teardown_result import TeardownResult

logger = logging.getLogger(__name__)


class VolumeReconciler:
    def __init__(self, client: RuntimeClient, executor: ParallelExecutor):
        self.client = client
        self.executor = executor

    def reconcile(
        self,
        volumes: Iterable[VolumeRecord],
        remove_volumes: bool,
        result: TeardownResult,
    ) -> None:
        """Remove the given volumes when remove_volumes is set, else do nothing."""
        if not remove_volumes:
            return

        outcomes = self.executor.map(self._remove, list(volumes))
        for outcome in outcomes:
            name = outcome.item.name
            if outcome.cancelled:
                result.record_skipped(ResourceKind.VOLUME, name)
            elif isinstance(outcome.error, ResourceNotFoundError):
                result.record_absent(ResourceKind.VOLUME, name)
            elif outcome.error is not None:
                logger.warning(f"Failed to remove volume {name}: {outcome.error}")
                result.record_failure(
                    ResourceKind.VOLUME, name, FailureStage.REMOVE, outcome.error
                )
            else:
                logger.debug(f"Removed volume {name}")
                result.record_removed(ResourceKind.VOLUME, name)

    def _remove(self, volume: VolumeRecord) -> None:
        self.client.remove_volume(volume.name, force=True)
