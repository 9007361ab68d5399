"""Stop-then-remove sequencing of project containers.

Each container is stopped with the runtime's default grace period and then
force-removed. A failed stop is recorded as a warning and removal is still
attempted, since a crashed or already stopped container must be removable.
Sibling containers are torn down concurrently with no ordering between them
unless the caller supplies precedence stages.
"""

import logging
from typing import Collection, List, Optional, Sequence

from ..errors import ResourceNotFoundError
from ..models import ContainerRecord, FailureStage, ResourceKind
from .parallel_executor import ParallelExecutor
from .runtime_client import RuntimeClient
from .teardown_result import TeardownResult

logger = logging.getLogger(__name__)


class ContainerSequencer:
    """Stop and remove containers with bounded concurrency."""

    def __init__(self, client: RuntimeClient, executor: ParallelExecutor):
        self.client = client
        self.executor = executor

    def teardown_container(
        self,
        container: ContainerRecord,
        remove_volumes: bool,
        result: TeardownResult,
    ) -> bool:
        """
        Stop and remove one container.

        Args:
            container: Container to tear down
            remove_volumes: Remove the container's anonymous volumes with it
            result: Accumulator for outcomes

        Returns:
            True if the container is gone afterwards
        """
        label = self._label(container)

        try:
            self.client.stop_container(container.id)
            logger.debug(f"Stopped container {label}")
        except ResourceNotFoundError:
            logger.debug(f"Container {label} already gone before stop")
        except Exception as e:
            logger.warning(f"Failed to stop container {label}: {e}")
            result.record_warning(
                ResourceKind.CONTAINER, container.id, FailureStage.STOP, e
            )

        if self.executor.cancelled:
            logger.info(f"Cancelled before removing container {label}")
            result.record_skipped(ResourceKind.CONTAINER, container.id)
            return False

        try:
            self.client.remove_container(
                container.id, force=True, remove_volumes=remove_volumes
            )
        except ResourceNotFoundError:
            logger.debug(f"Container {label} already removed")
            result.record_absent(ResourceKind.CONTAINER, container.id)
            return True
        except Exception as e:
            logger.warning(f"Failed to remove container {label}: {e}")
            result.record_failure(
                ResourceKind.CONTAINER, container.id, FailureStage.REMOVE, e
            )
            return False

        logger.debug(f"Removed container {label}")
        result.record_removed(ResourceKind.CONTAINER, container.id)
        return True

    def teardown_all(
        self,
        containers: List[ContainerRecord],
        remove_volumes: bool,
        result: TeardownResult,
        stages: Optional[Sequence[Collection[str]]] = None,
    ) -> None:
        """
        Tear down containers concurrently, stage by stage.

        Args:
            containers: Containers to tear down
            remove_volumes: Cascade removal to anonymous volumes
            result: Accumulator for outcomes
            stages: Optional ordered groups of service names; containers of a
                stage are removed only after every earlier stage finished.
                Containers whose service is in no stage go first.
        """
        for batch in self._batches(containers, stages):
            outcomes = self.executor.map(
                lambda container: self.teardown_container(
                    container, remove_volumes, result
                ),
                batch,
            )
            for outcome in outcomes:
                if outcome.cancelled:
                    result.record_skipped(ResourceKind.CONTAINER, outcome.item.id)
                elif outcome.error is not None:
                    # teardown_container records runtime errors itself
                    result.record_failure(
                        ResourceKind.CONTAINER,
                        outcome.item.id,
                        FailureStage.REMOVE,
                        outcome.error,
                    )

    @staticmethod
    def _batches(
        containers: List[ContainerRecord],
        stages: Optional[Sequence[Collection[str]]],
    ) -> List[List[ContainerRecord]]:
        if not stages:
            return [list(containers)] if containers else []

        # A service listed in several stages belongs to the first one
        assigned = set()
        staged = []
        for stage in stages:
            members = [
                c for c in containers if c.service in stage and c.id not in assigned
            ]
            assigned.update(c.id for c in members)
            staged.append(members)

        leading = [c for c in containers if c.id not in assigned]
        return [batch for batch in [leading, *staged] if batch]

    @staticmethod
    def _label(container: ContainerRecord) -> str:
        return container.name or container.id
