"""Version model, resource identities and the resolution error taxonomy."""

from .errors import (
    ChannelClosed,
    HttpError,
    JsonParsing,
    ResolverError,
    UnknownResourceScheme,
    UpstreamConnectionError,
    VersionParsing,
    WorkflowError,
)
from .models import Entity, Resolution, Resource, ResourceKind
from .parser import parse_reference
from .version import Version

__all__ = [
    "ChannelClosed",
    "Entity",
    "HttpError",
    "JsonParsing",
    "Resolution",
    "ResolverError",
    "Resource",
    "ResourceKind",
    "UnknownResourceScheme",
    "UpstreamConnectionError",
    "Version",
    "VersionParsing",
    "WorkflowError",
    "parse_reference",
]
