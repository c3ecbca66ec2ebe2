"""Client handle for the resolver service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from versioning.errors import ResolverError
from versioning.models import Entity, Resolution, Resource
from versioning.version import Version

if TYPE_CHECKING:  # pragma: no cover
    from .service import ResolverService

logger = logging.getLogger(__name__)


def _fmt(versions: List[Version]) -> str:
    return "[" + ", ".join(v.string for v in versions) + "]"


def pick_latest(versions: List[Version]) -> Optional[Version]:
    """Return the greatest version, the first one in list order on ties."""
    latest: Optional[Version] = None
    for version in versions:
        if latest is None or latest < version:
            latest = version
    return latest


def updated_line(entity: Entity, latest: Version) -> str:
    """Return the entity's reference text pinned to ``latest`` instead."""
    line = entity.line
    suffix = entity.version.string
    if line.endswith(suffix):
        return line[: len(line) - len(suffix)] + latest.string
    return line


class ResolverHandle:
    """Cheap, copyable client used to submit lookups to a ResolverService."""

    def __init__(self, service: "ResolverService"):
        self._service = service

    async def get_versions(self, resource: Resource) -> List[Version]:
        """Return every upstream version of ``resource``.

        Raises:
            ResolverError: the fetch failed, the resource kind is unknown,
                or the service is not running (ChannelClosed).
        """
        reply = await self._service.submit(resource)
        return await reply

    async def resolve(self, resource: Resource, current: Version) -> Resolution:
        """Find the latest version of ``resource``; never raises.

        Failures and empty listings leave ``latest`` unset.
        """
        try:
            versions = await self.get_versions(resource)
        except ResolverError as exc:
            logger.error("Error getting versions of %s: %s", resource, exc)
            return Resolution(resource=resource, current=current, error=exc)

        if not versions:
            logger.error("No versions found for %s", resource)
            return Resolution(resource=resource, current=current)
        if current not in versions:
            logger.warning(
                "Current version %s of %s not present in version list %s",
                current, resource, _fmt(versions),
            )
        latest = pick_latest(versions)
        logger.info("Got versions of %s: %s, latest %s", resource, _fmt(versions), latest)
        return Resolution(resource=resource, current=current, versions=versions, latest=latest)

    async def resolve_entity(self, entity: Entity) -> Entity:
        """Fill ``latest``, ``updated_line`` and ``error`` of ``entity`` in place and return it."""
        resolution = await self.resolve(entity.resource, entity.version)
        entity.error = resolution.error
        if resolution.latest is not None:
            entity.latest = resolution.latest
            entity.updated_line = updated_line(entity, resolution.latest)
        return entity
