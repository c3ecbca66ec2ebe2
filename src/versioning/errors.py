"""Error taxonomy for version resolution.

Every failure the resolver can deliver to a waiter is a ``ResolverError``
subclass, so callers can handle them with a single ``except`` clause.
"""

from __future__ import annotations

from typing import Optional


class ResolverError(Exception):
    """Base class for version resolution failures."""


class UnknownResourceScheme(ResolverError):
    """No updater strategy (or more than one) claims the resource."""

    def __init__(self, resource: str, detail: str = "updater not found"):
        super().__init__(f"{detail} for {resource}")
        self.resource = resource
        self.detail = detail


class HttpError(ResolverError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, url: str, status: int):
        super().__init__(f"{status} while getting {url}")
        self.url = url
        self.status = status


class JsonParsing(ResolverError):
    """Upstream body is not valid JSON or has an unexpected structure."""

    def __init__(self, detail: str):
        super().__init__(f"{detail} while parsing json")
        self.detail = detail


class VersionParsing(ResolverError):
    """A tag or ref string could not be turned into a version."""

    def __init__(self, raw: str):
        super().__init__(f"unable to parse version in {raw!r}")
        self.raw = raw


class ChannelClosed(ResolverError):
    """The resolver service is not running."""

    def __init__(self, detail: str = "resolver service is not running"):
        super().__init__(detail)


class UpstreamConnectionError(ResolverError):
    """The request never produced an HTTP response (DNS, TCP, timeout)."""

    def __init__(self, url: str, detail: str):
        super().__init__(f"{detail} while getting {url}")
        self.url = url
        self.detail = detail


class WorkflowError(Exception):
    """A workflow file could not be read, parsed or written."""

    def __init__(self, filename: str, detail: str, cause: Optional[BaseException] = None):
        super().__init__(f"{filename}: {detail}")
        self.filename = filename
        self.detail = detail
        self.cause = cause
