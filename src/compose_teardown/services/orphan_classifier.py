"""Orphan classification of project containers.

A container is an orphan when its service label is not one of the services
currently declared for the project. One-off containers created by ad-hoc
``run`` commands are always orphans. Classification is a pure function of
the container snapshot and the declared set; nothing is stored.
"""

from typing import Collection, List, Optional, Tuple

from ..models import ContainerRecord


def is_orphan(
    container: ContainerRecord, declared_services: Optional[Collection[str]]
) -> bool:
    """Return True if the container is not part of the declared services.

    With ``declared_services=None`` the declaration is unknown and only
    one-off containers count as orphans.
    """
    if container.one_off:
        return True
    if declared_services is None:
        return False
    return container.service not in declared_services


def classify_containers(
    containers: List[ContainerRecord],
    declared_services: Optional[Collection[str]],
) -> Tuple[List[ContainerRecord], List[ContainerRecord]]:
    """Partition containers into (declared, orphan), preserving order."""
    declared: List[ContainerRecord] = []
    orphans: List[ContainerRecord] = []
    for container in containers:
        if is_orphan(container, declared_services):
            orphans.append(container)
        else:
            declared.append(container)
    return declared, orphans
