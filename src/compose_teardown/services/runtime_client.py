"""
Container runtime client.

``RuntimeClient`` is the single I/O boundary of the teardown engine: every
list, stop and remove call goes through it, and nothing else talks to the
container engine. ``CliRuntimeClient`` drives the podman or docker
executable with subprocess.

Failures surface as exceptions:
- RuntimeUnavailableError when the executable cannot be run
- ResourceNotFoundError when the runtime says the object does not exist
- RuntimeClientError for every other non-zero exit or timeout
"""

import json
import logging
import re
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..config import TeardownConfig
from ..errors import (
    ResourceNotFoundError,
    RuntimeClientError,
    RuntimeUnavailableError,
)
from ..labels import (
    IMAGE_NAME_LABEL,
    ONEOFF_LABEL,
    PROJECT_LABEL,
    SERVICE_LABEL,
    Filters,
)
from ..models import ContainerRecord, NetworkRecord, ResourceKind, VolumeRecord

logger = logging.getLogger(__name__)

# Lower-cased stderr patterns docker and podman print when the named object
# itself is missing. Generic phrases like "no such file or directory" come
# from other failures and must not match.
NOT_FOUND_PATTERNS: Dict[ResourceKind, Tuple[str, ...]] = {
    ResourceKind.CONTAINER: (
        r"no such container",
        r"no container with name or id",
        r"no such object",
    ),
    ResourceKind.NETWORK: (
        r"no such network",
        r"network not found",
        r"network \S+ not found",
    ),
    ResourceKind.VOLUME: (r"no such volume", r"no volume with name"),
    ResourceKind.IMAGE: (r"no such image", r"image not known"),
}


class RuntimeClient(ABC):
    """Operations the teardown engine needs from a container runtime."""

    @abstractmethod
    def list_containers(self, filters: Filters) -> List[ContainerRecord]:
        """List containers (running or not) matching all filters."""

    @abstractmethod
    def stop_container(self, container_id: str, timeout: Optional[int] = None) -> None:
        """Stop a container; None keeps the runtime's default grace period."""

    @abstractmethod
    def remove_container(
        self, container_id: str, force: bool = False, remove_volumes: bool = False
    ) -> None:
        """Remove a container, optionally with its anonymous volumes."""

    @abstractmethod
    def list_networks(self, filters: Filters) -> List[NetworkRecord]:
        """List networks matching all filters."""

    @abstractmethod
    def remove_network(self, network_id: str) -> None:
        """Remove a network by id."""

    @abstractmethod
    def list_volumes(self, filters: Filters) -> List[VolumeRecord]:
        """List volumes matching all filters."""

    @abstractmethod
    def remove_volume(self, name: str, force: bool = False) -> None:
        """Remove a volume by name."""

    @abstractmethod
    def remove_image(self, reference: str, force: bool = False) -> None:
        """Remove an image by name or id."""


class CliRuntimeClient(RuntimeClient):
    """RuntimeClient backed by the podman or docker command line."""

    def __init__(
        self,
        runtime: Optional[str] = None,
        force_docker: bool = False,
        command_timeout: Optional[int] = None,
    ):
        """
        Initialize the client.

        Args:
            runtime: Executable to use ("podman" or "docker"); detected when None
            force_docker: Only consider docker during detection
            command_timeout: Timeout in seconds for each runtime command
        """
        self.force_docker = force_docker
        self.command_timeout = command_timeout
        self._runtime = runtime

    @classmethod
    def from_config(cls, config: TeardownConfig) -> "CliRuntimeClient":
        runtime = None if config.runtime == "auto" else config.runtime
        return cls(runtime=runtime, command_timeout=config.command_timeout)

    @property
    def runtime(self) -> str:
        """The runtime executable, detected on first use."""
        if self._runtime is None:
            detected = self._get_available_runtime()
            if detected is None:
                raise RuntimeUnavailableError("Neither podman nor docker is available")
            logger.debug(f"Using container runtime: {detected}")
            self._runtime = detected
        return self._runtime

    def _get_available_runtime(self) -> Optional[str]:
        """Get the available container runtime (podman or docker)."""
        candidates = ["docker"] if self.force_docker else ["podman", "docker"]
        for candidate in candidates:
            try:
                result = subprocess.run([candidate, "--version"], capture_output=True)
                if result.returncode == 0:
                    return candidate
            except FileNotFoundError:
                continue
        return None

    # Containers

    def list_containers(self, filters: Filters) -> List[ContainerRecord]:
        ps_result = self._run(
            ["ps", "-a", "-q", "--no-trunc", *self._filter_args(filters)]
        )
        container_ids = self._lines(ps_result.stdout)
        if not container_ids:
            return []

        # Containers removed between ps and inspect are dropped from the
        # output; the ones still present are printed regardless of exit code.
        cmd = ["inspect", "--type", "container", *container_ids]
        inspect_result = self._run(cmd, check=False)
        payload = inspect_result.stdout.strip()
        if inspect_result.returncode != 0 and not payload.startswith("["):
            error = self._error_for(
                [self.runtime, *cmd], inspect_result, ResourceKind.CONTAINER
            )
            if isinstance(error, ResourceNotFoundError):
                return []
            raise error

        try:
            entries = json.loads(payload or "[]")
        except json.JSONDecodeError as e:
            raise RuntimeClientError(
                f"Unparseable container inspect output: {e}",
                command=[self.runtime, *cmd],
            ) from e

        return [self._parse_container(entry) for entry in entries]

    def stop_container(self, container_id: str, timeout: Optional[int] = None) -> None:
        args = ["stop"]
        if timeout is not None:
            args += ["-t", str(timeout)]
        self._run(args + [container_id], kind=ResourceKind.CONTAINER)

    def remove_container(
        self, container_id: str, force: bool = False, remove_volumes: bool = False
    ) -> None:
        args = ["rm"]
        if force:
            args.append("-f")
        if remove_volumes:
            args.append("-v")
        self._run(args + [container_id], kind=ResourceKind.CONTAINER)

    # Networks

    def list_networks(self, filters: Filters) -> List[NetworkRecord]:
        result = self._run(
            [
                "network",
                "ls",
                "--no-trunc",
                "--format",
                "{{.ID}}\t{{.Name}}",
                *self._filter_args(filters),
            ]
        )
        networks = []
        for line in self._lines(result.stdout):
            network_id, _, name = line.partition("\t")
            networks.append(NetworkRecord(id=network_id.strip(), name=name.strip()))
        return networks

    def remove_network(self, network_id: str) -> None:
        self._run(["network", "rm", network_id], kind=ResourceKind.NETWORK)

    # Volumes

    def list_volumes(self, filters: Filters) -> List[VolumeRecord]:
        result = self._run(["volume", "ls", "-q", *self._filter_args(filters)])
        return [VolumeRecord(name=name) for name in self._lines(result.stdout)]

    def remove_volume(self, name: str, force: bool = False) -> None:
        args = ["volume", "rm"]
        if force:
            args.append("-f")
        self._run(args + [name], kind=ResourceKind.VOLUME)

    # Images

    def remove_image(self, reference: str, force: bool = False) -> None:
        args = ["rmi"]
        if force:
            args.append("-f")
        self._run(args + [reference], kind=ResourceKind.IMAGE)

    # Helpers

    def _run(
        self,
        args: Sequence[str],
        check: bool = True,
        kind: Optional[ResourceKind] = None,
    ) -> "subprocess.CompletedProcess[str]":
        cmd = [self.runtime, *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.command_timeout,
            )
        except FileNotFoundError as e:
            raise RuntimeUnavailableError(
                f"Container runtime not found: {self.runtime}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise RuntimeClientError(
                f"Timed out after {self.command_timeout}s: {' '.join(cmd)}",
                command=cmd,
            ) from e

        if check and result.returncode != 0:
            raise self._error_for(cmd, result, kind)
        return result

    @staticmethod
    def _error_for(
        cmd: List[str],
        result: "subprocess.CompletedProcess[str]",
        kind: Optional[ResourceKind] = None,
    ) -> RuntimeClientError:
        stderr = (result.stderr or "").strip()
        message = f"{' '.join(cmd)} failed: {stderr or f'exit code {result.returncode}'}"
        lowered = stderr.lower()
        error_class = (
            ResourceNotFoundError
            if kind is not None
            and any(
                re.search(pattern, lowered) for pattern in NOT_FOUND_PATTERNS[kind]
            )
            else RuntimeClientError
        )
        return error_class(
            message, command=cmd, returncode=result.returncode, stderr=stderr
        )

    @staticmethod
    def _filter_args(filters: Filters) -> List[str]:
        args: List[str] = []
        for key, values in filters.items():
            for value in values:
                args += ["--filter", f"{key}={value}"]
        return args

    @staticmethod
    def _lines(output: str) -> List[str]:
        return [line.strip() for line in (output or "").splitlines() if line.strip()]

    @staticmethod
    def _parse_container(entry: Dict[str, Any]) -> ContainerRecord:
        config = entry.get("Config") or {}
        labels = config.get("Labels") or {}
        return ContainerRecord(
            id=entry["Id"],
            name=(entry.get("Name") or "").lstrip("/"),
            service=labels.get(SERVICE_LABEL, ""),
            project=labels.get(PROJECT_LABEL, ""),
            image=config.get("Image") or entry.get("ImageName") or "",
            image_name_label=labels.get(IMAGE_NAME_LABEL),
            one_off=str(labels.get(ONEOFF_LABEL, "")).lower() == "true",
        )
