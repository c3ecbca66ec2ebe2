"""Base class for per-kind updater strategies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from versioning.models import Resource, ResourceKind
from versioning.version import Version

logger = logging.getLogger(__name__)


class Updater(ABC):
    """Fetch-and-parse strategy bound to one resource kind.

    Subclasses build the listing URL for a resource and turn the upstream
    JSON body into versions. Parsing is fail-closed: one malformed entry
    fails the whole fetch.
    """

    def __init__(self, http: HttpClient):
        """Initialize the updater.

        Args:
            http: Shared HTTP client used for upstream requests.
        """
        self.http = http

    @property
    @abstractmethod
    def kind(self) -> ResourceKind:
        """Resource kind handled by this updater."""

    def matches(self, resource: Resource) -> bool:
        """Return True when this updater can resolve ``resource``."""
        return resource.kind == self.kind

    @abstractmethod
    def url(self, resource: Resource) -> str:
        """Return the version listing URL for ``resource``."""

    def request_headers(self) -> Dict[str, str]:
        """Extra headers sent with every upstream request."""
        return {}

    @abstractmethod
    def parse_versions(self, data: Any) -> List[Version]:
        """Turn a decoded JSON body into versions, in upstream order."""

    async def get_versions(self, url: str) -> List[Version]:
        """Fetch ``url`` and parse it into versions.

        Raises:
            ResolverError: any HTTP, JSON or version parsing failure.
        """
        data = await self.http.get_json(url, headers=self.request_headers())
        versions = self.parse_versions(data)
        if is_debug_enabled(logger):
            logger.debug(
                "Parsed versions",
                extra=extra_context(
                    event="parse",
                    component="updater",
                    action=self.kind.value,
                    count=len(versions),
                    target=safe_url(url),
                )
            )
        return versions

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
