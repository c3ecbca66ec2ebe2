"""Reference parsing utilities for workflow ``uses`` values."""

import re
from typing import Optional, Tuple

from constants import Constants

from .models import Resource, ResourceKind
from .version import Version

_DOCKER_PREFIX = "docker://"
_GITHUB_RE = re.compile(
    r"^(?P<owner>[A-Za-z0-9][A-Za-z0-9_.-]*)/(?P<repo>[A-Za-z0-9_.-]+)"
    r"(?:/(?P<subpath>[^@]+))?@(?P<version>[^@\s]+)$"
)


def registry_host(image: str) -> Optional[str]:
    """Return the registry host of an image path, or None for Docker Hub defaults.

    Follows the docker CLI rule: the first component is a host when it
    contains a dot or a port, or is "localhost".
    """
    first, sep, _ = image.partition("/")
    if not sep:
        return None
    if "." in first or ":" in first or first == "localhost":
        return first.lower()
    return None


def normalize_docker_path(image: str) -> str:
    """Drop Docker Hub host aliases and add the implicit ``library/`` namespace."""
    host = registry_host(image)
    if host in Constants.DOCKER_HUB_HOSTS:
        image = image.split("/", 1)[1]
        host = None
    if host is None and "/" not in image:
        image = f"library/{image}"
    return image


def tokenize_rightmost_colon(s: str) -> Tuple[str, Optional[str]]:
    """Return (image, tag or None) using the rightmost-colon rule.

    A colon followed by a slash belongs to a registry port, not a tag.
    """
    s = s.strip()
    image, sep, tag = s.rpartition(":")
    if not sep or "/" in tag or not image:
        return s, None
    return image, tag or None


def parse_docker_reference(text: str) -> Optional[Tuple[Resource, Version]]:
    """Parse ``docker://image:tag`` into a resource and its pinned version."""
    if not text.startswith(_DOCKER_PREFIX):
        return None
    image, tag = tokenize_rightmost_colon(text[len(_DOCKER_PREFIX):])
    if tag is None or "@" in image or not image:
        return None
    resource = Resource(ResourceKind.DOCKER, normalize_docker_path(image))
    return resource, Version(tag)


def parse_github_reference(text: str) -> Optional[Tuple[Resource, Version]]:
    """Parse ``owner/repo[/subpath]@ref`` into a resource and its pinned version."""
    m = _GITHUB_RE.match(text.strip())
    if not m:
        return None
    owner, repo = m.group("owner"), m.group("repo")
    if owner.startswith(".") or repo in (".", ".."):
        return None
    resource = Resource(
        ResourceKind.GITHUB,
        f"{owner}/{repo}".lower(),
        subpath=(m.group("subpath") or "").strip("/"),
    )
    return resource, Version(m.group("version"))


def parse_reference(text: str) -> Optional[Tuple[Resource, Version]]:
    """Classify and parse a ``uses`` value.

    Returns None for values that do not name a versioned upstream artifact
    (local actions, digests, malformed strings).
    """
    if not isinstance(text, str):
        return None
    text = text.strip()
    if text.startswith(_DOCKER_PREFIX):
        return parse_docker_reference(text)
    if text.startswith("./") or text.startswith("../"):
        return None
    return parse_github_reference(text)
