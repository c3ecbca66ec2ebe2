"""In-memory updater used by the resolver tests."""

import asyncio
from typing import List, Optional

from updater.base import Updater
from versioning.errors import HttpError, ResolverError
from versioning.models import Resource, ResourceKind
from versioning.version import Version


class FakeUpdater(Updater):
    """Updater returning canned versions (or raising) and counting fetches.

    When ``gate`` is given, every fetch blocks until the event is set, which
    keeps the fetch in flight while more requests arrive.
    """

    def __init__(
        self,
        tags: Optional[List[str]] = None,
        error: Optional[BaseException] = None,
        kind: ResourceKind = ResourceKind.GITHUB,
        gate: Optional[asyncio.Event] = None,
    ):
        super().__init__(http=None)
        self._kind = kind
        self.tags = list(tags or [])
        self.error = error
        self.gate = gate
        self.urls: List[str] = []

    @property
    def kind(self) -> ResourceKind:
        return self._kind

    @property
    def calls(self) -> int:
        return len(self.urls)

    def url(self, resource: Resource) -> str:
        return f"fake://{resource.path}"

    def parse_versions(self, data):
        return [Version(t) for t in data]

    async def get_versions(self, url: str) -> List[Version]:
        self.urls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.parse_versions(self.tags)


class FailingUpdater(FakeUpdater):
    """Updater whose fetch raises a non-taxonomy exception."""

    async def get_versions(self, url: str) -> List[Version]:
        self.urls.append(url)
        raise RuntimeError("boom")


def http_failure() -> ResolverError:
    return HttpError("fake://actions/checkout", 500)
