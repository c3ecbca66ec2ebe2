"""Top level file processing: resolve, report and optionally rewrite one workflow."""

from __future__ import annotations

import logging

from constants import OutputFormat
from resolver.handle import ResolverHandle
from versioning.errors import WorkflowError
from versioning.models import Entity
from workflow import Workflow

logger = logging.getLogger(__name__)


def format_outdated(
    filename: str, entity: Entity, output_format: OutputFormat, dryrun: bool
) -> str:
    """Render the report line for one outdated entity."""
    if output_format == OutputFormat.GITHUB_WARNING:
        return (
            f"::warning file={filename}::update {entity.resource.display} "
            f"from {entity.version} to {entity.latest}"
        )
    dryrunmsg = " (dryrun)" if dryrun else ""
    return (
        f"{filename}: update {entity.resource.display} "
        f"from {entity.version} to {entity.latest}{dryrunmsg}"
    )


async def process_file(
    filename: str,
    handle: ResolverHandle,
    dryrun: bool = False,
    output_format: OutputFormat = OutputFormat.STANDARD,
) -> bool:
    """Process the provided file.

    Returns:
        bool: True if any outdated entities were found.

    Raises:
        WorkflowError: the file could not be parsed or written back.
    """
    try:
        workflow = Workflow.load(filename)
    except WorkflowError as e:
        logger.error("Error loading %s: %s", filename, e.detail)
        raise

    await workflow.fetch_latest_versions(handle)
    for entity in workflow.entities:
        if entity.error is not None:
            logger.error(
                "%s: error resolving %s: %s", filename, entity.resource.display, entity.error
            )

    outdated = workflow.outdated()
    for entity in outdated:
        print(format_outdated(filename, entity, output_format, dryrun))

    if not dryrun:
        try:
            if workflow.update_file():
                logger.info("Updated %s", filename)
            else:
                logger.info("Unchanged %s", filename)
        except WorkflowError as e:
            logger.error("Error writing %s: %s", filename, e.detail)
            raise
    return bool(outdated)
