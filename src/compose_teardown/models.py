"""Data model for project teardown.

Records are read-only snapshots of what the runtime reported at discovery
time. ``DownOptions`` is the caller's policy input and is never mutated.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImagePolicy(str, Enum):
    """Which images a teardown is allowed to delete."""

    NONE = "none"
    LOCAL = "local"
    ALL = "all"


class ResourceKind(str, Enum):
    CONTAINER = "container"
    NETWORK = "network"
    VOLUME = "volume"
    IMAGE = "image"


class FailureStage(str, Enum):
    STOP = "stop"
    REMOVE = "remove"
    RESOLVE = "resolve"


@dataclass(frozen=True)
class ContainerRecord:
    """A container as reported by the runtime.

    ``image_name_label`` distinguishes three states: ``None`` when the label
    is absent, ``""`` when it is present but empty, or the configured image
    name.
    """

    id: str
    name: str
    service: str
    project: str
    image: str = ""
    image_name_label: Optional[str] = None
    one_off: bool = False


@dataclass(frozen=True)
class NetworkRecord:
    """A network as reported by the runtime. ``name`` is not unique."""

    id: str
    name: str


@dataclass(frozen=True)
class VolumeRecord:
    name: str


@dataclass(frozen=True)
class ImageTarget:
    """An image reference selected for removal and the policy that chose it."""

    reference: str
    policy: ImagePolicy


@dataclass
class DiscoveredResources:
    """Everything the runtime reports for a project, no policy applied."""

    containers: List[ContainerRecord] = field(default_factory=list)
    networks: List[NetworkRecord] = field(default_factory=list)
    volumes: List[VolumeRecord] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.containers or self.networks or self.volumes)


class DownOptions(BaseModel):
    """User-selected teardown policy."""

    model_config = ConfigDict(frozen=True)

    remove_orphans: bool = Field(
        default=False,
        description="Also remove containers whose service is not declared",
    )
    remove_volumes: bool = Field(
        default=False,
        description="Remove named project volumes and anonymous container volumes",
    )
    image_policy: ImagePolicy = Field(
        default=ImagePolicy.NONE,
        description="Scope of image removal: none, local (built by compose) or all",
    )
