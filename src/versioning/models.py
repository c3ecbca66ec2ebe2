"""Data models for resources, usage sites and resolution outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .errors import ResolverError
from .version import Version


class ResourceKind(Enum):
    """Enum for supported resource kinds."""
    DOCKER = "docker"
    GITHUB = "github"


@dataclass(frozen=True)
class Resource:
    """Version-independent identity of an upstream artifact.

    Only ``kind`` and ``path`` take part in equality and hashing; ``subpath``
    (a sub-action or reusable workflow inside a GitHub repository) rides
    along for display and rewriting.
    """
    kind: ResourceKind
    path: str  # normalized: "library/alpine", "actions/checkout"
    subpath: str = field(default="", compare=False)

    def __str__(self) -> str:
        return f"{self.kind.value}://{self.path}"

    @property
    def display(self) -> str:
        """Resource name including the subpath, for reports."""
        if self.subpath:
            return f"{self}/{self.subpath}"
        return str(self)


@dataclass
class Entity:
    """One usage site of a resource inside a workflow file."""
    line: str  # the whole reference text, e.g. "actions/checkout@v3"
    resource: Resource
    version: Version
    latest: Optional[Version] = None
    updated_line: Optional[str] = None
    error: Optional[ResolverError] = None

    @property
    def is_outdated(self) -> bool:
        """True when a latest version is known and differs from the pinned one."""
        return self.latest is not None and self.latest != self.version


@dataclass
class Resolution:
    """Outcome of resolving one resource against its pinned version."""
    resource: Resource
    current: Version
    versions: List[Version] = field(default_factory=list)
    latest: Optional[Version] = None
    error: Optional[ResolverError] = None
