"""Updater strategies for the supported resource kinds."""

from typing import List, Optional, Sequence

from common.http_client import HttpClient
from versioning.errors import UnknownResourceScheme
from versioning.models import Resource

from .base import Updater
from .docker import DockerUpdater
from .github import GithubUpdater


def default_updaters(
    http: HttpClient,
    docker_hub_url: Optional[str] = None,
    github_api_url: Optional[str] = None,
    github_token: Optional[str] = None,
) -> List[Updater]:
    """Build the built-in updaters sharing one HTTP client."""
    return [
        DockerUpdater(http, base_url=docker_hub_url),
        GithubUpdater(http, base_url=github_api_url, token=github_token),
    ]


def updater_for(resource: Resource, updaters: Sequence[Updater]) -> Updater:
    """Select the single updater that handles ``resource``.

    Raises:
        UnknownResourceScheme: no updater, or more than one, matches.
    """
    matching = [u for u in updaters if u.matches(resource)]
    if not matching:
        raise UnknownResourceScheme(str(resource))
    if len(matching) > 1:
        raise UnknownResourceScheme(
            str(resource),
            detail=f"ambiguous updaters ({', '.join(repr(u) for u in matching)})",
        )
    return matching[0]


__all__ = [
    "Updater",
    "DockerUpdater",
    "GithubUpdater",
    "default_updaters",
    "updater_for",
]
