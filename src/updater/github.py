"""GitHub updater: lists tag refs of an action's repository."""

from __future__ import annotations

import os
import re
from typing import Any, Dict, List, Optional

from common.http_client import HttpClient
from constants import Constants
from versioning.errors import JsonParsing, VersionParsing
from versioning.models import Resource, ResourceKind
from versioning.version import Version

from .base import Updater

_REF_RE = re.compile(r"^refs/tags/(?P<version>.+)$")


def token_from_env() -> Optional[str]:
    """Return the GitHub token from GITHUB_TOKEN, falling back to PERSONAL_TOKEN."""
    for name in (Constants.ENV_GITHUB_TOKEN, Constants.ENV_PERSONAL_TOKEN):
        value = os.environ.get(name)
        if value and value.strip():
            return value.strip()
    return None


class GithubUpdater(Updater):
    """Updater for GitHub actions and reusable workflows.

    Supports optional authentication via the GITHUB_TOKEN environment
    variable, which raises the API rate limit.
    """

    def __init__(
        self,
        http: HttpClient,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
    ):
        """Initialize the GitHub updater.

        Args:
            http: Shared HTTP client.
            base_url: API base URL (defaults to Constants.GITHUB_API_BASE).
            token: Bearer token (defaults to the environment).
        """
        super().__init__(http)
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip("/")
        self.token = token if token is not None else token_from_env()

    @property
    def kind(self) -> ResourceKind:
        """Return the GitHub resource kind."""
        return ResourceKind.GITHUB

    def url(self, resource: Resource) -> str:
        return f"{self.base_url}/repos/{resource.path}/git/matching-refs/tags"

    def request_headers(self) -> Dict[str, str]:
        """Get request headers including authorization if a token is available."""
        headers = {"Accept": Constants.GITHUB_ACCEPT}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def parse_versions(self, data: Any) -> List[Version]:
        if not isinstance(data, list):
            raise JsonParsing("invalid type for tag object list")
        versions = []
        for tag_obj in data:
            if not isinstance(tag_obj, dict):
                raise JsonParsing("invalid type for tag object")
            if "ref" not in tag_obj:
                raise JsonParsing("ref field not found in tag object")
            ref = tag_obj["ref"]
            if not isinstance(ref, str):
                raise JsonParsing("invalid type for ref field in tag object")
            m = _REF_RE.match(ref)
            if not m:
                raise VersionParsing(ref)
            versions.append(Version(m.group("version")))
        return versions
