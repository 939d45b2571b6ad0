"""Load start files (YAML) into start configurations."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shipyard.docker.config import Link, StartConfiguration
from shipyard.exceptions import StartFileError


class LinkSchema(BaseModel):
    """Link entry of a container."""

    model_config = ConfigDict(extra="forbid")

    target_id: str = Field(..., min_length=1)
    alias: str = Field(..., min_length=1)


class ContainerSchema(BaseModel):
    """One container entry in a start file."""

    model_config = ConfigDict(extra="forbid")

    image: str = Field(..., min_length=1, description="Image reference or built-image alias")
    id: Optional[str] = Field(default=None, min_length=1)
    links: List[LinkSchema] = Field(default_factory=list)
    wait_for_startup: Optional[str] = None
    startup_timeout: Optional[int] = Field(default=None, ge=0)
    command: Optional[List[str]] = None
    hostname: Optional[str] = None
    user: Optional[str] = None
    memory: Optional[int] = Field(default=None, gt=0, description="Memory limit in bytes")
    environment: Optional[Dict[str, str]] = None

    @field_validator("command", mode="before")
    @classmethod
    def split_command(cls, v):
        """Accept a command given as a single string."""
        if isinstance(v, str):
            return v.split()
        return v

    def to_configuration(self, default_timeout: Optional[int] = None) -> StartConfiguration:
        return StartConfiguration(
            image=self.image,
            id=self.id,
            links=tuple(Link(target_id=link.target_id, alias=link.alias) for link in self.links),
            wait_for_startup=self.wait_for_startup or None,
            startup_timeout=self.startup_timeout or default_timeout,
            command=tuple(self.command) if self.command else None,
            hostname=self.hostname,
            user=self.user,
            memory=self.memory,
            environment=self.environment,
        )


class StartFileSchema(BaseModel):
    """Top level of a start file."""

    model_config = ConfigDict(extra="forbid")

    containers: List[ContainerSchema] = Field(default_factory=list)
    built_images: Dict[str, str] = Field(default_factory=dict)


def load_start_file(
    path: Path, default_timeout: Optional[int] = None
) -> Tuple[List[StartConfiguration], Dict[str, str]]:
    """
    Read a start file.

    Args:
        path: YAML file with ``containers`` and optional ``built_images``
        default_timeout: Startup timeout for containers that declare none

    Returns:
        Tuple of (configurations in declared order, built image aliases)

    Raises:
        StartFileError: If the file cannot be read or does not match the schema
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise StartFileError(str(path), e.strerror or str(e)) from e
    except yaml.YAMLError as e:
        raise StartFileError(str(path), f"not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise StartFileError(str(path), "top level must be a mapping")

    try:
        schema = StartFileSchema.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise StartFileError(str(path), details) from e

    configurations = [
        container.to_configuration(default_timeout) for container in schema.containers
    ]
    return configurations, dict(schema.built_images)
