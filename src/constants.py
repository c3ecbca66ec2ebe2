"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    OUTDATED = 2


class OutputFormat(Enum):
    """Formats for the outdated entity report.

    Args:
        Enum (string): Output formats supported by the program.
    """

    STANDARD = "standard"
    GITHUB_WARNING = "github-warning"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    DOCKER_HUB_URL = "https://registry.hub.docker.com"
    DOCKER_HUB_HOSTS = ("docker.io", "index.docker.io", "registry.hub.docker.com")
    DOCKER_PAGE_SIZE = 100
    DOCKER_MAX_PAGES = 10
    GITHUB_API_BASE = "https://api.github.com"
    GITHUB_ACCEPT = "application/vnd.github.v3+json"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    ENV_PERSONAL_TOKEN = "PERSONAL_TOKEN"
    ENV_LOG_LEVEL = "GHWORKFLOWS_LOG_LEVEL"
    USER_AGENT = "github-workflows-update/0.1"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    RESOLVER_QUEUE_SIZE = 32
    WORKFLOWS_DIR = ".github/workflows"
    WORKFLOW_SUFFIXES = (".yml", ".yaml")
    CONFIG_SECTION = "github_workflows_update"
    OUTPUT_FORMATS = [fmt.value for fmt in OutputFormat]
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    LOG_FORMAT = "[%(levelname)s] %(message)s"
