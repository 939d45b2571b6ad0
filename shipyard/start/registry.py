"""Registry of images produced by earlier build steps."""

from typing import Dict, Mapping, Optional, Tuple

import structlog

from shipyard.exceptions import BuiltImageError

logger = structlog.get_logger(__name__)


class BuiltImageRegistry:
    """
    Maps build-time aliases to the image ids they produced.

    Fill it before a run starts; the orchestrator only reads from it.

    Usage:
        registry = BuiltImageRegistry({"app": "sha256:3f2a..."})
        registry.resolve("app")          # "sha256:3f2a..."
        registry.resolve("redis:7")      # "redis:7"
    """

    def __init__(self, images: Optional[Mapping[str, str]] = None):
        self._images: Dict[str, str] = dict(images or {})

    def register(self, alias: str, image_id: str) -> None:
        """Record the image produced for ``alias``."""
        logger.debug("built_image_registered", alias=alias, image_id=image_id)
        self._images[alias] = image_id

    def resolve(self, image: str) -> str:
        """Return the registered id for ``image``, or ``image`` unchanged."""
        return self._images.get(image, image)

    def __contains__(self, alias: object) -> bool:
        return alias in self._images

    def __len__(self) -> int:
        return len(self._images)


def parse_built_image(value: str) -> Tuple[str, str]:
    """
    Parse an ``alias=image-id`` mapping as given on the command line.

    Raises:
        BuiltImageError: If either side is empty or there is no ``=``
    """
    alias, sep, image_id = value.partition("=")
    alias, image_id = alias.strip(), image_id.strip()
    if not sep or not alias or not image_id:
        raise BuiltImageError(value)
    return alias, image_id
