"""Providers of the declared service names of a compose project."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

import yaml  # type: ignore

logger = logging.getLogger(__name__)


class ProjectDescriptor(ABC):
    """Source of the services currently declared for a project."""

    @abstractmethod
    def service_names(self) -> Set[str]:
        """Return the declared service names."""

    @property
    def project_name(self) -> Optional[str]:
        return None


class StaticProjectDescriptor(ProjectDescriptor):
    """Descriptor over an explicit list of service names."""

    def __init__(self, services: Iterable[str], project_name: Optional[str] = None):
        self._services = {name for name in services if name}
        self._project_name = project_name

    def service_names(self) -> Set[str]:
        return set(self._services)

    @property
    def project_name(self) -> Optional[str]:
        return self._project_name


class ComposeFileDescriptor(ProjectDescriptor):
    """Descriptor reading the ``services`` keys of compose files.

    Only top-level keys are read. The files are not merged, interpolated or
    validated; the declared set is the union of every file's service keys.
    """

    def __init__(self, paths: Union[Path, Iterable[Path]]):
        self.paths: List[Path] = (
            [Path(paths)] if isinstance(paths, (str, Path)) else list(paths)
        )
        self._documents: Optional[List[Dict[str, Any]]] = None

    def _load(self) -> List[Dict[str, Any]]:
        if self._documents is None:
            documents = []
            for path in self.paths:
                try:
                    with open(path, "r") as f:
                        data = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    raise ValueError(f"Failed to read compose file {path}: {e}")
                if not isinstance(data, dict):
                    raise ValueError(f"Compose file {path} is not a mapping")
                documents.append(data)
            self._documents = documents
        return self._documents

    def service_names(self) -> Set[str]:
        names: Set[str] = set()
        for document in self._load():
            services = document.get("services") or {}
            if not isinstance(services, dict):
                raise ValueError("'services' must be a mapping of service names")
            names.update(str(name) for name in services)
        logger.debug(f"Declared services: {sorted(names)}")
        return names

    @property
    def project_name(self) -> Optional[str]:
        # Later files override earlier ones
        name = None
        for document in self._load():
            if document.get("name"):
                name = str(document["name"])
        return name
