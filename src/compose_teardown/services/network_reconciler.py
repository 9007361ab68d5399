"""Removal of project networks.

Network names are not unique in the runtime, and ids seen at discovery may
be stale by the time containers are gone. Each distinct discovered name is
therefore looked up again right before deletion and every network currently
carrying exactly that name is removed.
"""

import logging
from typing import Iterable, List

from ..errors import ResourceNotFoundError
from ..labels import name_filter
from ..models import FailureStage, NetworkRecord, ResourceKind
from .parallel_executor import ParallelExecutor
from .runtime_client import RuntimeClient
from .teardown_result import TeardownResult

logger = logging.getLogger(__name__)


class NetworkReconciler:
    """Remove every live network sharing a discovered project network name."""

    def __init__(self, client: RuntimeClient, executor: ParallelExecutor):
        self.client = client
        self.executor = executor

    def reconcile(
        self, networks: Iterable[NetworkRecord], result: TeardownResult
    ) -> None:
        names = self.distinct_names(networks)
        outcomes = self.executor.map(
            lambda name: self.reconcile_name(name, result), names
        )
        for outcome in outcomes:
            if outcome.cancelled:
                result.record_skipped(ResourceKind.NETWORK, outcome.item)
            elif outcome.error is not None:
                result.record_failure(
                    ResourceKind.NETWORK,
                    outcome.item,
                    FailureStage.REMOVE,
                    outcome.error,
                )

    def reconcile_name(self, name: str, result: TeardownResult) -> None:
        """Re-resolve one network name and remove every match.

        A failed removal does not stop removal of the other networks with the
        same name.
        """
        try:
            matches = [
                network
                for network in self.client.list_networks(name_filter(name))
                if network.name == name
            ]
        except Exception as e:
            logger.warning(f"Failed to resolve network {name}: {e}")
            result.record_failure(
                ResourceKind.NETWORK, name, FailureStage.RESOLVE, e
            )
            return

        if not matches:
            logger.debug(f"Network {name} no longer exists")
            result.record_absent(ResourceKind.NETWORK, name)
            return

        if len(matches) > 1:
            logger.info(f"Found {len(matches)} networks named {name}, removing all")

        for network in matches:
            if self.executor.cancelled:
                result.record_skipped(ResourceKind.NETWORK, network.id)
                continue
            try:
                self.client.remove_network(network.id)
            except ResourceNotFoundError:
                result.record_absent(ResourceKind.NETWORK, network.id)
            except Exception as e:
                logger.warning(f"Failed to remove network {name} ({network.id}): {e}")
                result.record_failure(
                    ResourceKind.NETWORK, network.id, FailureStage.REMOVE, e
                )
            else:
                logger.debug(f"Removed network {name} ({network.id})")
                result.record_removed(ResourceKind.NETWORK, network.id)

    @staticmethod
    def distinct_names(networks: Iterable[NetworkRecord]) -> List[str]:
        names: List[str] = []
        for network in networks:
            if network.name and network.name not in names:
                names.append(network.name)
        return names
