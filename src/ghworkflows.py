"""github-workflows-update - check GitHub workflows for outdated actions and images

    Returns:
        int: Exit code
"""
import asyncio
import logging
import os
import sys
from typing import List

from args import parse_args
from cli_config import RunConfig
from common.http_client import HttpClient
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes, OutputFormat
from processor import process_file
from resolver.service import ResolverService
from updater import default_updaters

logger = logging.getLogger(__name__)


def collect_workflow_files(paths: List[str]) -> List[str]:
    """Expand directories into their workflow files.

    Args:
        paths (list): Files and/or directories.

    Raises:
        FileNotFoundError: If a path does not exist.

    Returns:
        list: Workflow file paths, directories expanded in sorted order.
    """
    files = []
    for path in paths:
        if os.path.isdir(path):
            for name in sorted(os.listdir(path)):
                full = os.path.join(path, name)
                if os.path.isfile(full) and name.endswith(Constants.WORKFLOW_SUFFIXES):
                    files.append(full)
        elif os.path.isfile(path):
            files.append(path)
        else:
            raise FileNotFoundError(path)
    return files


async def run(config: RunConfig, files: List[str]) -> int:
    """Process every file against one shared resolver; return the exit code."""
    async with HttpClient(timeout=config.request_timeout) as http:
        updaters = default_updaters(
            http,
            docker_hub_url=config.docker_hub_url,
            github_api_url=config.github_api_url,
        )
        async with ResolverService(updaters) as service:
            results = await asyncio.gather(
                *(
                    process_file(f, service.new_handle(), config.dry_run, config.output_format)
                    for f in files
                ),
                return_exceptions=True,
            )
            if is_debug_enabled(logger):
                logger.debug(
                    "Resolver finished",
                    extra=extra_context(event="function_exit", component="cli", **service.stats())
                )

    any_outdated = False
    any_failed = False
    for filename, result in zip(files, results):
        if isinstance(result, BaseException):
            # Errors are logged where they happen; only the exit code is left.
            logger.debug("Processing of %s failed: %r", filename, result)
            any_failed = True
        elif result:
            any_outdated = True

    if any_failed:
        return ExitCodes.FILE_ERROR.value
    if any_outdated and config.error_on_outdated:
        if config.output_format == OutputFormat.GITHUB_WARNING:
            print("::error ::outdated entities found")
        else:
            sys.stderr.write("Found outdated entities\n")
        return ExitCodes.OUTDATED.value
    return ExitCodes.SUCCESS.value


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    if args.LOG_FILE:
        add_file_handler(args.LOG_FILE)
        logger.info("Logging to file: %s", args.LOG_FILE)

    config = RunConfig.from_args(args)
    try:
        files = collect_workflow_files(config.paths)
    except FileNotFoundError as e:
        logger.error("Path not found: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value
    if not files:
        logger.warning("No workflow files found in %s", ", ".join(config.paths))
        return ExitCodes.SUCCESS.value

    logger.info("Processing %d workflow file(s)", len(files))
    return asyncio.run(run(config, files))


if __name__ == "__main__":
    sys.exit(main())
