"""
Shared test helpers for Compose Teardown tests.

Provides a thread-safe in-memory runtime client that records every call the
teardown engine makes.
"""

import threading
from typing import Dict, List, Optional, Set

from compose_teardown.errors import ResourceNotFoundError
from compose_teardown.models import ContainerRecord, NetworkRecord, VolumeRecord
from compose_teardown.services.runtime_client import RuntimeClient

TEST_PROJECT = "testProject"

_UNSET = object()


def make_container(
    service: str,
    container_id: str,
    one_off: bool = False,
    project: str = TEST_PROJECT.lower(),
    image_name_label=_UNSET,
    image: Optional[str] = None,
) -> ContainerRecord:
    """Build a container record as discovery reports compose containers."""
    return ContainerRecord(
        id=container_id,
        name=f"{project}-{service}-{container_id}",
        service=service,
        project=project,
        image=image if image is not None else f"{service}-img",
        image_name_label=None if image_name_label is _UNSET else image_name_label,
        one_off=one_off,
    )


class FakeRuntimeClient(RuntimeClient):
    """In-memory runtime client that records calls for verification."""

    def __init__(
        self,
        containers: Optional[List[ContainerRecord]] = None,
        networks: Optional[List[NetworkRecord]] = None,
        volumes: Optional[List[VolumeRecord]] = None,
        live_networks: Optional[List[NetworkRecord]] = None,
    ):
        self.containers = list(containers or [])
        self.networks = list(networks or [])
        self.volumes = list(volumes or [])
        # Networks returned by name lookups; defaults to the discovered ones
        self.live_networks = list(
            live_networks if live_networks is not None else self.networks
        )
        self.missing_images: Set[str] = set()
        self.fail_on: Dict[str, Exception] = {}
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def _record(self, *call) -> None:
        with self._lock:
            self.calls.append(call)
        error = self.fail_on.get(f"{call[0]}:{call[1]}") or self.fail_on.get(call[0])
        if error is not None:
            raise error

    def calls_to(self, operation: str) -> List[tuple]:
        with self._lock:
            return [call for call in self.calls if call[0] == operation]

    def list_containers(self, filters):
        self._record("list_containers", repr(filters))
        return list(self.containers)

    def stop_container(self, container_id, timeout=None):
        self._record("stop_container", container_id, timeout)

    def remove_container(self, container_id, force=False, remove_volumes=False):
        self._record("remove_container", container_id, force, remove_volumes)

    def list_networks(self, filters):
        if "name" in filters:
            self._record("resolve_network", filters["name"][0])
            return [n for n in self.live_networks if filters["name"][0] in n.name]
        self._record("list_networks", repr(filters))
        return list(self.networks)

    def remove_network(self, network_id):
        self._record("remove_network", network_id)

    def list_volumes(self, filters):
        self._record("list_volumes", repr(filters))
        return list(self.volumes)

    def remove_volume(self, name, force=False):
        self._record("remove_volume", name, force)

    def remove_image(self, reference, force=False):
        self._record("remove_image", reference, force)
        if reference in self.missing_images:
            raise ResourceNotFoundError(f"No such image: {reference}")
