"""Resource discovery for a compose project.

Lists the containers, networks and volumes carrying the project label. The
three queries are independent and run concurrently. Discovery is read-only
and applies no policy; any query failure aborts the teardown.
"""

import logging
from typing import Optional

from ..errors import DiscoveryError
from ..labels import container_filter, normalize_project_name, project_filter
from ..models import DiscoveredResources
from .parallel_executor import ParallelExecutor
from .runtime_client import RuntimeClient

logger = logging.getLogger(__name__)


class ResourceDiscovery:
    """Query the runtime for everything labelled with a project name."""

    def __init__(
        self, client: RuntimeClient, executor: Optional[ParallelExecutor] = None
    ):
        self.client = client
        # Independent of the teardown cancellation event
        self.executor = executor or ParallelExecutor(max_workers=3)

    def discover(self, project: str, include_orphans: bool = True) -> DiscoveredResources:
        """
        Discover the project's containers, networks and volumes.

        Args:
            project: Project name; normalized before querying
            include_orphans: When False, one-off containers are excluded by
                the runtime query itself

        Returns:
            DiscoveredResources snapshot

        Raises:
            DiscoveryError: If any runtime query fails
        """
        project = normalize_project_name(project)
        queries = {
            "containers": lambda: self.client.list_containers(
                container_filter(project, include_one_off=include_orphans)
            ),
            "networks": lambda: self.client.list_networks(project_filter(project)),
            "volumes": lambda: self.client.list_volumes(project_filter(project)),
        }

        outcomes = self.executor.map(lambda name: queries[name](), list(queries))
        listed = {}
        for outcome in outcomes:
            if outcome.error is not None:
                logger.error(
                    f"Failed to list {outcome.item} of project {project}: {outcome.error}"
                )
                raise DiscoveryError(
                    f"Cannot list {outcome.item} of project '{project}': {outcome.error}"
                ) from outcome.error
            if outcome.cancelled:
                raise DiscoveryError(
                    f"Discovery of project '{project}' was cancelled"
                )
            listed[outcome.item] = outcome.value or []

        resources = DiscoveredResources(
            containers=list(listed["containers"]),
            networks=list(listed["networks"]),
            volumes=list(listed["volumes"]),
        )
        logger.debug(
            f"Discovered {len(resources.containers)} containers, "
            f"{len(resources.networks)} networks, {len(resources.volumes)} volumes "
            f"for project {project}"
        )
        return resources
