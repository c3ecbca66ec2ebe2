"""Workflow file parsing and in-place rewriting."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, Iterator, List

import yaml

from resolver.handle import ResolverHandle
from versioning.errors import WorkflowError
from versioning.models import Entity
from versioning.parser import parse_reference

logger = logging.getLogger(__name__)


def _iter_uses(data: Any) -> Iterator[str]:
    """Yield every ``uses`` value of the jobs and their steps."""
    if not isinstance(data, dict):
        raise ValueError("invalid type for workflow document")
    jobs = data.get("jobs")
    if jobs is None:
        raise ValueError("jobs entry not found")
    if not isinstance(jobs, dict):
        raise ValueError("invalid type for jobs entry")
    for job in jobs.values():
        if not isinstance(job, dict):
            continue
        if "uses" in job:
            yield job["uses"]
        steps = job.get("steps")
        if steps is None:
            continue
        if not isinstance(steps, list):
            raise ValueError("invalid type for steps entry")
        for step in steps:
            if isinstance(step, dict) and "uses" in step:
                yield step["uses"]


def parse_entities(contents: str) -> List[Entity]:
    """Extract the versioned references of a workflow, one entity per distinct text.

    Raises:
        ValueError: the document is not YAML or has no usable ``jobs`` mapping.
    """
    try:
        data = yaml.safe_load(contents)
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid yaml: {exc}") from exc

    entities: Dict[str, Entity] = {}
    for reference in _iter_uses(data):
        if not isinstance(reference, str):
            raise ValueError("invalid type for uses entry")
        reference = reference.strip()
        if reference in entities:
            continue
        parsed = parse_reference(reference)
        if parsed is None:
            logger.warning("Unable to parse resource in %r", reference)
            continue
        resource, version = parsed
        logger.info("Parsed entity %s version %s", resource.display, version)
        entities[reference] = Entity(line=reference, resource=resource, version=version)
    return list(entities.values())


def rewrite_uses(contents: str, entities: List[Entity]) -> str:
    """Replace outdated ``uses`` values in ``contents``.

    Only text in ``uses:`` value position is touched, optionally quoted and
    followed by a comment.
    """
    for entity in entities:
        if not entity.is_outdated or not entity.updated_line:
            continue
        pattern = re.compile(
            r"(\buses:[ \t]*[\"']?)"
            + re.escape(entity.line)
            + r"(?=[\"']?[ \t]*(?:#[^\r\n]*)?\r?$)",
            re.MULTILINE,
        )
        replacement = entity.updated_line
        contents = pattern.sub(lambda m: m.group(1) + replacement, contents)
    return contents


class Workflow:
    """A workflow file with the entities it uses."""

    def __init__(self, filename: str, contents: str, entities: List[Entity]):
        self.filename = filename
        self.contents = contents
        self.entities = entities

    @classmethod
    def load(cls, filename: str) -> "Workflow":
        """Read and parse a workflow file.

        Raises:
            WorkflowError: the file cannot be read or parsed.
        """
        try:
            with open(filename, encoding="utf-8", newline="") as fh:
                contents = fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise WorkflowError(filename, f"unable to read file: {exc}", exc) from exc
        try:
            entities = parse_entities(contents)
        except ValueError as exc:
            raise WorkflowError(filename, str(exc), exc) from exc
        return cls(filename, contents, entities)

    async def fetch_latest_versions(self, handle: ResolverHandle) -> None:
        """Resolve every entity concurrently through the shared resolver."""
        await asyncio.gather(*(handle.resolve_entity(e) for e in self.entities))

    def outdated(self) -> List[Entity]:
        """Entities whose latest version differs from the pinned one."""
        return [e for e in self.entities if e.is_outdated]

    def update_file(self) -> bool:
        """Write the rewritten contents back; return True when the file changed.

        Raises:
            WorkflowError: the file cannot be written.
        """
        updated = rewrite_uses(self.contents, self.entities)
        if updated == self.contents:
            return False
        try:
            with open(self.filename, "w", encoding="utf-8", newline="") as fh:
                fh.write(updated)
        except OSError as exc:
            raise WorkflowError(self.filename, f"error writing updated file: {exc}", exc) from exc
        self.contents = updated
        return True
