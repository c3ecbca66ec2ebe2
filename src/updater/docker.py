"""Docker Hub updater: lists image tags from the registry API."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from common.http_client import HttpClient
from common.logging_utils import safe_url
from constants import Constants
from versioning.errors import JsonParsing
from versioning.models import Resource, ResourceKind
from versioning.parser import registry_host
from versioning.version import Version

from .base import Updater

logger = logging.getLogger(__name__)


class DockerUpdater(Updater):
    """Updater for ``docker://`` images hosted on Docker Hub."""

    def __init__(self, http: HttpClient, base_url: Optional[str] = None):
        """Initialize the Docker Hub updater.

        Args:
            http: Shared HTTP client.
            base_url: Registry API base (defaults to Constants.DOCKER_HUB_URL).
        """
        super().__init__(http)
        self.base_url = (base_url or Constants.DOCKER_HUB_URL).rstrip("/")

    @property
    def kind(self) -> ResourceKind:
        """Return the Docker resource kind."""
        return ResourceKind.DOCKER

    def matches(self, resource: Resource) -> bool:
        # Images on other registries (ghcr.io, quay.io, ...) are not handled.
        return super().matches(resource) and registry_host(resource.path) is None

    def url(self, resource: Resource) -> str:
        return (
            f"{self.base_url}/v2/repositories/{resource.path}/tags"
            f"?page_size={Constants.DOCKER_PAGE_SIZE}"
        )

    def parse_versions(self, data: Any) -> List[Version]:
        """Parse a tag listing.

        Accepts the paged form ``{"results": [{"name": ...}], "next": ...}``
        and the legacy bare list ``[{"name": ...}]``.
        """
        if isinstance(data, dict):
            data = data.get("results")
        if not isinstance(data, list):
            raise JsonParsing("invalid type for tag object list")
        versions = []
        for layer in data:
            if not isinstance(layer, dict):
                raise JsonParsing("invalid type for tag object")
            if "name" not in layer:
                raise JsonParsing('"name" field not found in tag object')
            name = layer["name"]
            if not isinstance(name, str):
                raise JsonParsing('invalid type for "name" field in tag object')
            versions.append(Version(name))
        return versions

    async def get_versions(self, url: str) -> List[Version]:
        """Fetch every page of the tag listing, following ``next`` links."""
        versions: List[Version] = []
        next_url: Optional[str] = url
        pages = 0
        while next_url and pages < Constants.DOCKER_MAX_PAGES:
            data = await self.http.get_json(next_url, headers=self.request_headers())
            versions.extend(self.parse_versions(data))
            pages += 1
            next_url = data.get("next") if isinstance(data, dict) else None
            if next_url is not None and not isinstance(next_url, str):
                raise JsonParsing('invalid type for "next" field in tag listing')
        if next_url:
            logger.warning(
                "Stopped listing tags of %s after %d pages", safe_url(url), pages
            )
        return versions
