"""Compose label keys and label-based runtime filters."""

from typing import Dict, List

PROJECT_LABEL = "com.docker.compose.project"
SERVICE_LABEL = "com.docker.compose.service"
ONEOFF_LABEL = "com.docker.compose.oneoff"
IMAGE_NAME_LABEL = "com.docker.compose.image_name"

Filters = Dict[str, List[str]]


def normalize_project_name(name: str) -> str:
    """Return the lower-cased project name used in every runtime query.

    Raises:
        ValueError: If the name is empty after stripping whitespace
    """
    normalized = (name or "").strip().lower()
    if not normalized:
        raise ValueError("Project name must not be empty")
    return normalized


def project_filter(project: str) -> Filters:
    return {"label": [f"{PROJECT_LABEL}={project}"]}


def container_filter(project: str, include_one_off: bool = True) -> Filters:
    """Project filter for containers, optionally excluding one-off containers."""
    filters = project_filter(project)
    if not include_one_off:
        filters["label"].append(f"{ONEOFF_LABEL}=False")
    return filters


def name_filter(name: str) -> Filters:
    return {"name": [name]}


def default_image_name(project: str, service: str) -> str:
    """Image name compose assigns to a built service with no explicit image."""
    return f"{project}-{service}"
