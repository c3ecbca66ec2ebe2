"""Single-flight version resolver: service actor and client handle."""

from .handle import ResolverHandle, pick_latest
from .service import FetchCompleted, ResolveRequest, ResolverService

__all__ = [
    "FetchCompleted",
    "ResolveRequest",
    "ResolverHandle",
    "ResolverService",
    "pick_latest",
]
