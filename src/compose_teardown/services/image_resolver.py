"""Selection of the image to delete for a removed container.

| policy | image-name label | target                          |
|--------|------------------|---------------------------------|
| none   | any              | none                            |
| local  | absent           | none (image was never built)    |
| local  | "name"           | "name"                          |
| local  | ""               | "<project>-<service>"           |
| all    | absent           | image the container runs        |
| all    | "name"           | "name"                          |
| all    | ""               | "<project>-<service>"           |

An empty label marks an image built under the default naming convention.
"""

from typing import Iterable, List, Optional

from ..labels import default_image_name
from ..models import ContainerRecord, ImagePolicy, ImageTarget


def resolve_image_target(
    container: ContainerRecord, policy: ImagePolicy, project: str
) -> Optional[ImageTarget]:
    """Return the image removal target for a container, or None to skip it."""
    policy = ImagePolicy(policy)
    if policy == ImagePolicy.NONE:
        return None

    label = container.image_name_label
    if label is None:
        if policy == ImagePolicy.LOCAL or not container.image:
            return None
        return ImageTarget(reference=container.image, policy=policy)

    if label:
        return ImageTarget(reference=label, policy=policy)

    return ImageTarget(
        reference=default_image_name(container.project or project, container.service),
        policy=policy,
    )


def resolve_image_targets(
    containers: Iterable[ContainerRecord], policy: ImagePolicy, project: str
) -> List[ImageTarget]:
    """Resolve targets for several containers, one per distinct reference."""
    targets: List[ImageTarget] = []
    seen = set()
    for container in containers:
        target = resolve_image_target(container, policy, project)
        if target is not None and target.reference not in seen:
            seen.add(target.reference)
            targets.append(target)
    return targets
