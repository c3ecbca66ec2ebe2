"""Argument parsing functionality for github-workflows-update."""

import argparse
from constants import Constants

def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="ghworkflows-update",
        description=(
            "Check GitHub workflows for actions and images that can be updated"
        ),
        add_help=True,
    )

    parser.add_argument("paths",
                        metavar="PATH",
                        help=f"Workflow files or directories (default: {Constants.WORKFLOWS_DIR})",
                        nargs="*")
    parser.add_argument("-n", "--dry-run",
                        dest="DRY_RUN",
                        help="Don't update the workflows, just print what would be done",
                        action="store_true")
    parser.add_argument("-f", "--output-format",
                        dest="OUTPUT_FORMAT",
                        help="Output format for the outdated entity messages (default: standard)",
                        action="store",
                        type=str.lower,
                        choices=Constants.OUTPUT_FORMATS)
    parser.add_argument("--error-on-outdated",
                        dest="ERROR_ON_OUTDATED",
                        help="Exit with a non-zero status code if outdated entities are found.",
                        action="store_true")

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--docker-hub-url",
                        dest="DOCKER_HUB_URL",
                        help="Docker Hub API base URL",
                        action="store",
                        type=str)
    parser.add_argument("--github-api-url",
                        dest="GITHUB_API_URL",
                        help="GitHub API base URL",
                        action="store",
                        type=str)
    parser.add_argument("--timeout",
                        dest="REQUEST_TIMEOUT",
                        help="Timeout in seconds for each upstream request",
                        action="store",
                        type=int)

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=Constants.LOG_LEVELS)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
