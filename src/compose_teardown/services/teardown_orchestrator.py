"""
Teardown orchestration for compose projects.

Composes discovery, orphan classification, container sequencing and the
network, volume and image reconcilers into a single ``down`` operation:

1. discover containers, networks and volumes (fatal on failure)
2. classify containers into declared and orphan
3. stop and remove the selected containers concurrently
4. once every container is gone: networks, then volumes, then images

Teardown is best-effort. Failures of one resource never prevent attempts on
the others; all of them are collected in the returned TeardownResult.
"""

import logging
import threading
from typing import Collection, Optional, Sequence

from ..config import TeardownConfig
from ..labels import normalize_project_name
from ..models import DownOptions
from .container_sequencer import ContainerSequencer
from .discovery import ResourceDiscovery
from .image_reconciler import ImageReconciler
from .image_resolver import resolve_image_targets
from .network_reconciler import NetworkReconciler
from .orphan_classifier import classify_containers
from .parallel_executor import ParallelExecutor
from .project_descriptor import ProjectDescriptor
from .runtime_client import CliRuntimeClient, RuntimeClient
from .teardown_result import TeardownResult
from .volume_reconciler import VolumeReconciler

logger = logging.getLogger(__name__)


class TeardownOrchestrator:
    """Reconcile a compose project's runtime resources to empty."""

    def __init__(
        self,
        client: RuntimeClient,
        config: Optional[TeardownConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Runtime client shared by every component
            config: Teardown settings (worker pool size)
            cancel_event: External cancellation signal
        """
        self.client = client
        self.config = config or TeardownConfig()
        self.cancel_event = cancel_event or threading.Event()
        self.executor = ParallelExecutor(
            max_workers=self.config.max_workers, cancel_event=self.cancel_event
        )

        self.discovery = ResourceDiscovery(client)
        self.sequencer = ContainerSequencer(client, self.executor)
        self.network_reconciler = NetworkReconciler(client, self.executor)
        self.volume_reconciler = VolumeReconciler(client, self.executor)
        self.image_reconciler = ImageReconciler(client, self.executor)

    def request_cancellation(self) -> None:
        """Stop dispatching runtime calls; calls in flight are allowed to finish."""
        self.executor.cancel()
        logger.info("Teardown cancellation requested")

    def down(
        self,
        project_name: str,
        options: Optional[DownOptions] = None,
        declared_services: Optional[Collection[str]] = None,
        stages: Optional[Sequence[Collection[str]]] = None,
    ) -> TeardownResult:
        """
        Tear down every resource of a project.

        Args:
            project_name: Project name (normalized to lower case)
            options: Orphan, volume and image policy
            declared_services: Services currently declared for the project;
                None when unknown
            stages: Optional ordered groups of service names for container
                removal

        Returns:
            TeardownResult with removed, skipped and failed resources

        Raises:
            DiscoveryError: If project resources cannot be listed
            ValueError: If the project name is empty
        """
        options = options or DownOptions()
        project = normalize_project_name(project_name)
        result = TeardownResult(project=project)

        if self.cancel_event.is_set():
            logger.info(f"Teardown of project {project} cancelled before discovery")
            result.cancelled = True
            return result

        resources = self.discovery.discover(project, include_orphans=True)
        if resources.is_empty():
            logger.info(f"Project {project} has no resources to remove")
            result.cancelled = self.cancel_event.is_set()
            return result

        declared, orphans = classify_containers(
            resources.containers, declared_services
        )
        if options.remove_orphans:
            containers = declared + orphans
        else:
            containers = declared
            if orphans:
                result.orphans_left = [c.name or c.id for c in orphans]
                logger.warning(
                    f"Found orphan containers ({', '.join(result.orphans_left)}) "
                    f"for project {project}; remove them with --remove-orphans"
                )

        image_targets = resolve_image_targets(
            containers, options.image_policy, project
        )

        self.sequencer.teardown_all(
            containers, options.remove_volumes, result, stages=stages
        )
        # Containers are gone (or failed) before any shared resource is touched
        self.network_reconciler.reconcile(resources.networks, result)
        self.volume_reconciler.reconcile(
            resources.volumes, options.remove_volumes, result
        )
        self.image_reconciler.reconcile(image_targets, result)

        result.cancelled = self.cancel_event.is_set()
        summary = result.summary()
        logger.info(
            f"Teardown of project {project}: {summary['container']} containers, "
            f"{summary['network']} networks, {summary['volume']} volumes, "
            f"{summary['image']} images removed; {summary['failed']} failed, "
            f"{summary['skipped']} skipped"
        )
        return result


def down(
    project_name: str,
    options: Optional[DownOptions] = None,
    descriptor: Optional[ProjectDescriptor] = None,
    client: Optional[RuntimeClient] = None,
    config: Optional[TeardownConfig] = None,
    cancel_event: Optional[threading.Event] = None,
    stages: Optional[Sequence[Collection[str]]] = None,
) -> TeardownResult:
    """Tear down a project using the podman/docker command line by default.

    The declared service set comes from ``descriptor``; without one the
    declaration is unknown and only one-off containers are orphans.
    """
    config = config or TeardownConfig()
    client = client or CliRuntimeClient.from_config(config)
    declared = descriptor.service_names() if descriptor is not None else None
    orchestrator = TeardownOrchestrator(client, config, cancel_event=cancel_event)
    return orchestrator.down(project_name, options, declared, stages=stages)
