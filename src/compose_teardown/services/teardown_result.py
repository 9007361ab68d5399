"""Aggregated outcome of a project teardown.

Worker threads record into one ``TeardownResult``; every mutation happens
under the result's lock.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Union

from ..errors import TeardownFailedError
from ..models import FailureStage, ResourceKind


@dataclass(frozen=True)
class ResourceRef:
    kind: ResourceKind
    identifier: str

    def __str__(self) -> str:
        return f"{self.kind.value} {self.identifier}"


@dataclass(frozen=True)
class ResourceFailure:
    """A resource-level failure tagged with kind, id/name and cause."""

    kind: ResourceKind
    identifier: str
    stage: FailureStage
    cause: str

    def __str__(self) -> str:
        return (
            f"{self.kind.value} {self.identifier}: "
            f"{self.stage.value} failed: {self.cause}"
        )


@dataclass
class TeardownResult:
    """Everything a teardown did, skipped or failed to do."""

    project: str
    removed: List[ResourceRef] = field(default_factory=list)
    already_absent: List[ResourceRef] = field(default_factory=list)
    skipped: List[ResourceRef] = field(default_factory=list)
    failures: List[ResourceFailure] = field(default_factory=list)
    warnings: List[ResourceFailure] = field(default_factory=list)
    orphans_left: List[str] = field(default_factory=list)
    cancelled: bool = False
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @property
    def ok(self) -> bool:
        """True when nothing failed and nothing was skipped by cancellation."""
        return not self.failures and not self.skipped

    def record_removed(self, kind: ResourceKind, identifier: str) -> None:
        with self._lock:
            self.removed.append(ResourceRef(kind, identifier))

    def record_absent(self, kind: ResourceKind, identifier: str) -> None:
        with self._lock:
            self.already_absent.append(ResourceRef(kind, identifier))

    def record_skipped(self, kind: ResourceKind, identifier: str) -> None:
        with self._lock:
            self.skipped.append(ResourceRef(kind, identifier))

    def record_failure(
        self,
        kind: ResourceKind,
        identifier: str,
        stage: FailureStage,
        cause: Union[Exception, str],
    ) -> None:
        with self._lock:
            self.failures.append(ResourceFailure(kind, identifier, stage, str(cause)))

    def record_warning(
        self,
        kind: ResourceKind,
        identifier: str,
        stage: FailureStage,
        cause: Union[Exception, str],
    ) -> None:
        with self._lock:
            self.warnings.append(ResourceFailure(kind, identifier, stage, str(cause)))

    def removed_of(self, kind: ResourceKind) -> List[str]:
        with self._lock:
            return [ref.identifier for ref in self.removed if ref.kind == kind]

    def summary(self) -> Dict[str, int]:
        with self._lock:
            counts = {kind.value: 0 for kind in ResourceKind}
            for ref in self.removed:
                counts[ref.kind.value] += 1
            counts["failed"] = len(self.failures)
            counts["skipped"] = len(self.skipped)
            return counts

    def raise_for_failures(self) -> None:
        """Raise TeardownFailedError when any resource could not be removed."""
        if self.failures:
            details = "; ".join(str(failure) for failure in self.failures)
            raise TeardownFailedError(
                f"{len(self.failures)} resource(s) of project '{self.project}' "
                f"could not be removed: {details}",
                list(self.failures),
            )
