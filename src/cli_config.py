"""Runtime configuration: defaults, optional YAML config file and CLI overrides.

Precedence is CLI flag > config file > Constants defaults. A missing or
invalid config file is reported and ignored.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from constants import Constants, OutputFormat

logger = logging.getLogger(__name__)

_FILE_KEYS = {
    "docker_hub_url": str,
    "github_api_url": str,
    "request_timeout": int,
    "workflows_dir": str,
    "output_format": str,
}


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load settings from a YAML config file.

    Settings are read from the ``github_workflows_update`` section when
    present, otherwise from the top level. Unknown keys are ignored.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Dict of recognized settings (possibly empty).
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config: %s", e)
        return {}

    if not isinstance(data, dict):
        logger.error("Config file %s must contain a mapping", config_path)
        return {}
    section = data.get(Constants.CONFIG_SECTION, data)
    if not isinstance(section, dict):
        logger.error("Config section %s must be a mapping", Constants.CONFIG_SECTION)
        return {}

    settings: Dict[str, Any] = {}
    for key, caster in _FILE_KEYS.items():
        if key not in section or section[key] is None:
            continue
        try:
            settings[key] = caster(section[key])
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid config value for %s: %r", key, section[key])
    output_format = settings.get("output_format")
    if output_format is not None and output_format not in Constants.OUTPUT_FORMATS:
        logger.warning("Ignoring unknown output_format %r", output_format)
        del settings["output_format"]
    return settings


@dataclass
class RunConfig:
    """Configuration for one run."""

    paths: List[str]
    dry_run: bool = False
    output_format: OutputFormat = OutputFormat.STANDARD
    error_on_outdated: bool = False
    docker_hub_url: str = Constants.DOCKER_HUB_URL
    github_api_url: str = Constants.GITHUB_API_BASE
    request_timeout: int = Constants.REQUEST_TIMEOUT

    @classmethod
    def from_args(cls, args: Any) -> "RunConfig":
        """Create config from CLI arguments and the optional config file.

        Args:
            args: Parsed CLI arguments namespace.

        Returns:
            RunConfig instance.
        """
        settings = load_config_file(getattr(args, "CONFIG", None))

        paths = list(getattr(args, "paths", None) or [])
        if not paths:
            paths = [settings.get("workflows_dir", Constants.WORKFLOWS_DIR)]

        config = cls(
            paths=paths,
            dry_run=bool(getattr(args, "DRY_RUN", False)),
            error_on_outdated=bool(getattr(args, "ERROR_ON_OUTDATED", False)),
            docker_hub_url=settings.get("docker_hub_url", Constants.DOCKER_HUB_URL),
            github_api_url=settings.get("github_api_url", Constants.GITHUB_API_BASE),
            request_timeout=settings.get("request_timeout", Constants.REQUEST_TIMEOUT),
        )

        output_format = getattr(args, "OUTPUT_FORMAT", None) or settings.get("output_format")
        if output_format:
            config.output_format = OutputFormat(output_format)
        if getattr(args, "DOCKER_HUB_URL", None):
            config.docker_hub_url = args.DOCKER_HUB_URL
        if getattr(args, "GITHUB_API_URL", None):
            config.github_api_url = args.GITHUB_API_URL
        if getattr(args, "REQUEST_TIMEOUT", None) is not None:
            config.request_timeout = args.REQUEST_TIMEOUT

        return config
