"""Single-flight version resolver service.

The service is an asyncio actor: one loop task consumes a queue of messages
and is the only code that reads or writes the cache and the pending table.
Fetches run as separate tasks and report back through the same queue, so at
most one fetch per resource is ever in flight and every caller that asked
for a resource before the fetch finished receives the same result.

Failed fetches are delivered to their waiters but not cached; a later
request for the same resource starts a new fetch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from updater import Updater, updater_for
from versioning.errors import ChannelClosed, ResolverError, UnknownResourceScheme
from versioning.models import Resource
from versioning.version import Version

from .handle import ResolverHandle

logger = logging.getLogger(__name__)


@dataclass
class ResolveRequest:
    """A caller asking for the versions of ``resource``."""
    resource: Resource
    reply: asyncio.Future


@dataclass
class FetchCompleted:
    """A fetch task finished; exactly one of ``versions``/``error`` is set."""
    resource: Resource
    versions: Optional[Tuple[Version, ...]] = None
    error: Optional[ResolverError] = None


def _deliver(
    reply: asyncio.Future,
    versions: Optional[Tuple[Version, ...]],
    error: Optional[ResolverError],
) -> None:
    """Complete a reply future unless the caller already gave up on it."""
    if reply.done():
        return
    if error is not None:
        reply.set_exception(error)
    else:
        reply.set_result(list(versions or ()))


class ResolverService:
    """Owner of the version cache and the table of pending requests."""

    def __init__(
        self,
        updaters: Sequence[Updater],
        queue_size: int = Constants.RESOLVER_QUEUE_SIZE,
    ):
        """Initialize the service.

        Args:
            updaters: Strategies used to classify and fetch resources.
            queue_size: Bound of the inbound message queue.
        """
        self._updaters = list(updaters)
        self._queue_size = queue_size
        self._queue: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None
        self._cache: Dict[Resource, Tuple[Version, ...]] = {}
        self._pending: Dict[Resource, List[asyncio.Future]] = {}
        self._fetches: Set[asyncio.Task] = set()
        self._closed = False
        self._fetch_count = 0
        self._failure_count = 0

    @property
    def running(self) -> bool:
        """True while the loop task accepts requests."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the loop task on the running event loop."""
        if self.running:
            return
        self._closed = False
        self._queue = asyncio.Queue(maxsize=self._queue_size)
        self._task = asyncio.create_task(self._run(self._queue), name="resolver-service")
        logger.info("Resolver service started")

    async def stop(self) -> None:
        """Stop the loop, cancel in-flight fetches and fail remaining waiters."""
        if self._task is None:
            return
        task, self._task = self._task, None
        self._closed = True
        task.cancel()
        for fetch in list(self._fetches):
            fetch.cancel()
        await asyncio.gather(task, *self._fetches, return_exceptions=True)
        self._fetches.clear()

        pending, self._pending = self._pending, {}
        for replies in pending.values():
            for reply in replies:
                _deliver(reply, None, ChannelClosed("resolver service stopped"))
        if self._queue is not None:
            await self._drain(self._queue)
        logger.info("Resolver service stopped")

    async def _drain(self, queue: asyncio.Queue) -> None:
        # Every get wakes one submitter blocked on a full queue; keep going
        # until a pass over the event loop leaves nothing behind.
        while True:
            while not queue.empty():
                msg = queue.get_nowait()
                if isinstance(msg, ResolveRequest):
                    _deliver(msg.reply, None, ChannelClosed("resolver service stopped"))
            await asyncio.sleep(0)
            if queue.empty():
                return

    def new_handle(self) -> ResolverHandle:
        """Create a client handle bound to this service."""
        return ResolverHandle(self)

    async def submit(self, resource: Resource) -> asyncio.Future:
        """Enqueue a request and return the future its reply will arrive on.

        Raises:
            ChannelClosed: the service is not running.
        """
        if not self.running or self._queue is None:
            raise ChannelClosed()
        reply = asyncio.get_running_loop().create_future()
        await self._queue.put(ResolveRequest(resource, reply))
        if self._closed:
            # Stopped while this request waited for room in the queue.
            _deliver(reply, None, ChannelClosed("resolver service stopped"))
        return reply

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "cached_resources": len(self._cache),
            "pending_resources": len(self._pending),
            "pending_requests": sum(len(r) for r in self._pending.values()),
            "fetches": self._fetch_count,
            "failed_fetches": self._failure_count,
        }

    async def _run(self, queue: asyncio.Queue) -> None:
        while True:
            msg = await queue.get()
            try:
                if isinstance(msg, ResolveRequest):
                    self._handle_request(msg)
                elif isinstance(msg, FetchCompleted):
                    self._handle_completed(msg)
                else:
                    logger.error("Unexpected resolver message: %r", msg)
            except Exception:  # pylint: disable=broad-exception-caught
                # One bad message must not take the service down.
                logger.exception("Error processing resolver message %r", msg)

    def _inbox(self) -> asyncio.Queue:
        if self._queue is None:
            raise ChannelClosed()
        return self._queue

    def _handle_request(self, msg: ResolveRequest) -> None:
        resource = msg.resource
        cached = self._cache.get(resource)
        if cached is not None:
            if is_debug_enabled(logger):
                logger.debug(
                    "Cache hit",
                    extra=extra_context(
                        event="cache_hit", component="resolver", target=str(resource)
                    )
                )
            _deliver(msg.reply, cached, None)
            return

        waiters = self._pending.get(resource)
        if waiters:
            logger.debug("Fetch already in flight for %s", resource)
            waiters.append(msg.reply)
            return

        try:
            updater = updater_for(resource, self._updaters)
        except UnknownResourceScheme as exc:
            logger.error("Error getting updater for %s: %s", resource, exc)
            _deliver(msg.reply, None, exc)
            return

        self._pending[resource] = [msg.reply]
        self._fetch_count += 1
        fetch = asyncio.create_task(self._fetch(resource, updater, self._inbox()))
        self._fetches.add(fetch)
        fetch.add_done_callback(self._fetches.discard)
        logger.info("Fetch started for %s", resource)

    def _handle_completed(self, msg: FetchCompleted) -> None:
        resource = msg.resource
        if msg.error is None:
            self._cache[resource] = msg.versions or ()
        else:
            self._failure_count += 1
        waiters = self._pending.pop(resource, None)
        if waiters is None:
            logger.error("No pending request found for %s", resource)
            return
        logger.info("Retrieved %s, answering %d pending request(s)", resource, len(waiters))
        for reply in waiters:
            _deliver(reply, msg.versions, msg.error)

    async def _fetch(self, resource: Resource, updater: Updater, queue: asyncio.Queue) -> None:
        versions: Optional[Tuple[Version, ...]] = None
        error: Optional[ResolverError] = None
        try:
            url = updater.url(resource)
            versions = tuple(await updater.get_versions(url))
        except ResolverError as exc:
            logger.error("Error getting versions of %s via %r: %s", resource, updater, exc)
            error = exc
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.exception("Unexpected error getting versions of %s", resource)
            error = ResolverError(f"unexpected error: {exc}")
            error.__cause__ = exc
        await queue.put(FetchCompleted(resource, versions, error))

    async def __aenter__(self) -> "ResolverService":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.stop()
