"""
Configuration management for ticketdoc.
"""

import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli

import lib.utils as utils
from lib.richtext import DisplayProjector, GrammarRegistry, MarkdownParser, MarkdownRenderer
from lib.richtext.segmenter import DEFAULT_MAX_NESTING_DEPTH

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        "level": "WARNING",
        "console": True,
    },
    "converter": {
        "max-nesting-depth": DEFAULT_MAX_NESTING_DEPTH,
        "panel-emoji": True,
    },
    "highlight": {
        "enabled": True,
        "aliases": {},
    },
}


def replaceMatchToEnv(match: re.Match[str]) -> str:
    """Replace environment variable placeholders with actual values.

    Args:
        match: A regex match object containing the environment variable name.

    Returns:
        str: The value of the environment variable or the original placeholder
             if the variable is not set.
    """
    key = match.group(1)
    return os.getenv(key, match.group(0))


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} placeholders in strings, dicts and lists."""
    if isinstance(value, str):
        return re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}", replaceMatchToEnv, value)
    elif isinstance(value, dict):
        return {k: substituteEnvVars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


class ConfigManager:
    """Manages configuration loading for ticketdoc and builds configured engine objects."""

    def __init__(
        self, configPath: Optional[str] = None, configDirs: Optional[List[str]] = None, dotEnvFile: str = ".env"
    ):
        """
        Initialize ConfigManager.

        Args:
            configPath: Main TOML file, None to start from defaults only
            configDirs: Directories scanned recursively for extra .toml files
            dotEnvFile: Optional dotenv file loaded before ${VAR} substitution
        """
        self.config_path = configPath
        self.config_dirs = configDirs or []
        utils.load_dotenv(path=dotEnvFile)
        self.config = substituteEnvVars(self._mergeConfigs(DEFAULT_CONFIG, self._loadConfig()))

    def _findTomlFilesRecursive(self, directory: str) -> List[Path]:
        """Recursively find all .toml files in a directory."""
        toml_files: List[Path] = []
        dir_path = Path(directory)

        if not dir_path.exists():
            logger.warning(f"Config directory {directory} does not exist, skipping")
            return toml_files

        if not dir_path.is_dir():
            logger.warning(f"Config path {directory} is not a directory, skipping")
            return toml_files

        for toml_file in dir_path.rglob("*.toml"):
            if toml_file.is_file():
                toml_files.append(toml_file)
                logger.debug(f"Found config file: {toml_file}")

        return sorted(toml_files)  # Sort for consistent ordering

    def _mergeConfigs(self, base_config: Dict[str, Any], new_config: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries."""
        merged = base_config.copy()

        for key, value in new_config.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                # Recursively merge nested dictionaries
                merged[key] = self._mergeConfigs(merged[key], value)
            else:
                # Override with new value
                merged[key] = value

        return merged

    def _loadConfig(self) -> Dict[str, Any]:
        """
        Load configuration from the main TOML file and optional config directories.

        Files found in config directories are merged over the main file in
        sorted order. A broken file in a config directory is logged and skipped.

        Raises:
            SystemExit: If the main configuration file is given but neither it
                nor any config directory exists, or if it cannot be parsed
        """
        config: Dict[str, Any] = {}

        if self.config_path is not None:
            config_file = Path(self.config_path)
            if not config_file.exists():
                if not self.config_dirs:
                    logger.error(f"Configuration file {self.config_path} not found!")
                    sys.exit(1)
                logger.warning(f"Configuration file {self.config_path} not found, using config directories only")
            else:
                try:
                    with open(config_file, "rb") as f:
                        config = tomli.load(f)
                except (OSError, tomli.TOMLDecodeError) as e:
                    logger.error(f"Failed to load configuration {self.config_path}: {e}")
                    sys.exit(1)
                logger.info(f"Loaded main config from {self.config_path}")

        for config_dir in self.config_dirs:
            toml_files = self._findTomlFilesRecursive(config_dir)
            logger.info(f"Found {len(toml_files)} .toml files in {config_dir}")

            for toml_file in toml_files:
                try:
                    with open(toml_file, "rb") as f:
                        dir_config = tomli.load(f)
                except (OSError, tomli.TOMLDecodeError) as e:
                    logger.error(f"Failed to load config file {toml_file}: {e}")
                    # Continue with other files instead of exiting
                    continue

                config = self._mergeConfigs(config, dir_config)
                logger.info(f"Merged config from {toml_file}")

        return config

    def get(self, key: str, default=None) -> Any:
        """Get configuration value by key."""
        return self.config.get(key, default)

    def getLoggingConfig(self) -> Dict[str, Any]:
        """Get logging-specific configuration."""
        return self.get("logging", {})

    def getConverterConfig(self) -> Dict[str, Any]:
        """
        Get converter configuration.

        Keys:
        - max-nesting-depth: Block quote nesting depth parsed recursively
        - panel-emoji: Prefix panels rendered as Markdown quotes with an emoji
        """
        return self.get("converter", {})

    def getHighlightConfig(self) -> Dict[str, Any]:
        """
        Get highlight configuration.

        Keys:
        - enabled: Highlight code blocks in display trees
        - aliases: Extra language aliases, e.g. ``{ tf = "text", jsonc = "json" }``
        """
        return self.get("highlight", {})

    def buildParser(self) -> MarkdownParser:
        """Create a MarkdownParser configured from the [converter] section."""
        converterConfig = self.getConverterConfig()
        return MarkdownParser(
            {"max_nesting_depth": int(converterConfig.get("max-nesting-depth", DEFAULT_MAX_NESTING_DEPTH))}
        )

    def buildMarkdownRenderer(self) -> MarkdownRenderer:
        """Create a MarkdownRenderer configured from the [converter] section."""
        return MarkdownRenderer({"panel_emoji": bool(self.getConverterConfig().get("panel-emoji", True))})

    def buildProjector(self) -> DisplayProjector:
        """Create a DisplayProjector configured from the [highlight] and [converter] sections."""
        highlightConfig = self.getHighlightConfig()
        aliases = {str(k).lower(): str(v) for k, v in highlightConfig.get("aliases", {}).items()}
        return DisplayProjector(
            registry=GrammarRegistry.default(),
            highlight=bool(highlightConfig.get("enabled", True)),
            parser=self.buildParser(),
            aliases=aliases,
        )
