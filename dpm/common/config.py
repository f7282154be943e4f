"""Configuration file loading and management"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from dpm.common.types import FixMode

DEFAULT_LOG_FILE = "/tmp/display_priority_manager.log"
DEFAULT_LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"

_HARDWARE_STRING_KEYS = (
    "vendor",
    "product",
    "sys_vendor_path",
    "product_name_path",
    "discrete_driver_path",
    "discrete_gpu_pattern",
    "integrated_gpu_pattern",
    "lspci_command",
    "drm_path",
)


class ConfigurationError(ValueError):
    """Invalid configuration or command-line input"""


@dataclass
class FixConfig:
    """Remediation policy settings"""
    mode: FixMode = FixMode.AUTO
    force: bool = False
    dry_run: bool = False
    max_retries: int = 3
    retry_delay: int = 5  # seconds between attempts


@dataclass
class HardwareConfig:
    """Eligibility gate parameters and introspection paths"""
    vendor: str = "Dell"
    product: str = "Precision 7780"
    sys_vendor_path: str = "/sys/class/dmi/id/sys_vendor"
    product_name_path: str = "/sys/class/dmi/id/product_name"
    discrete_driver_path: str = "/proc/driver/nvidia"
    discrete_gpu_pattern: str = "nvidia"
    integrated_gpu_pattern: str = "intel.*(graphics|vga)"
    lspci_command: str = "lspci"
    drm_path: str = "/sys/class/drm"
    min_displays: int = 2


@dataclass
class KscreenConfig:
    """Compositor tool settings"""
    command: str = "kscreen-doctor"
    internal_patterns: list[str] = field(default_factory=lambda: ["eDP", "LVDS"])
    timeout_seconds: Optional[float] = None


@dataclass
class LoggingConfig:
    """Logging configuration settings"""
    level: str = "INFO"
    file: Optional[str] = DEFAULT_LOG_FILE
    format: str = DEFAULT_LOG_FORMAT
    syslog: bool = False
    verbose: bool = False
    debug: bool = False


@dataclass
class Config:
    """Complete application configuration"""
    fix: FixConfig = field(default_factory=FixConfig)
    hardware: HardwareConfig = field(default_factory=HardwareConfig)
    kscreen: KscreenConfig = field(default_factory=KscreenConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader:
    """Loads and parses configuration from YAML files"""

    DEFAULT_CONFIG_PATHS = [
        "config.yml",
        "~/.config/display-priority-manager/config.yml",
        "/etc/display-priority-manager/config.yml",
    ]

    @staticmethod
    def configFile_find() -> Optional[Path]:
        """
        Find configuration file in standard locations

        Returns:
            Path to config file, or None if not found
        """
        for config_path in ConfigLoader.DEFAULT_CONFIG_PATHS:
            path = Path(config_path).expanduser().resolve()
            if path.exists() and path.is_file():
                return path
        return None

    @staticmethod
    def yaml_load(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML configuration file

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed configuration dictionary; an empty file yields {}

        Raises:
            OSError: If the file does not exist or cannot be read
            ConfigurationError: If file is not a YAML dictionary
        """
        with open(file_path, "r") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Config file {file_path} is not valid YAML: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {file_path} must contain a YAML dictionary")

        return data

    @staticmethod
    def config_parse(data: Dict[str, Any]) -> Config:
        """
        Parse configuration dictionary into Config object

        Every section and key is optional; missing values take the
        built-in defaults.

        Args:
            data: Raw configuration dictionary

        Returns:
            Parsed and validated Config object

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        fix_data = ConfigLoader._section_get(data, "fix")
        fix = FixConfig(**fix_data)
        if not isinstance(fix.mode, FixMode):
            fix.mode = ConfigLoader.mode_parse(str(fix.mode))

        hardware = HardwareConfig(**ConfigLoader._section_get(data, "hardware"))

        kscreen_data = ConfigLoader._section_get(data, "kscreen")
        kscreen = KscreenConfig(**kscreen_data)
        if isinstance(kscreen.internal_patterns, str):
            kscreen.internal_patterns = [kscreen.internal_patterns]

        logging_config = LoggingConfig(**ConfigLoader._section_get(data, "logging"))

        config = Config(fix=fix, hardware=hardware, kscreen=kscreen, logging=logging_config)
        ConfigLoader.config_validate(config)
        return config

    @staticmethod
    def _section_get(data: Dict[str, Any], name: str) -> Dict[str, Any]:
        """
        Fetch one top-level section, rejecting keys its dataclass lacks

        Args:
            data: Raw configuration dictionary
            name: Section name

        Returns:
            Section dictionary (empty when absent)
        """
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"Config section '{name}' must be a dictionary")

        allowed = {
            "fix": FixConfig,
            "hardware": HardwareConfig,
            "kscreen": KscreenConfig,
            "logging": LoggingConfig,
        }[name].__dataclass_fields__
        unknown = sorted(set(section) - set(allowed))
        if unknown:
            raise ConfigurationError(f"Unknown key(s) in '{name}' section: {', '.join(unknown)}")
        return section

    @staticmethod
    def mode_parse(value: str) -> FixMode:
        """
        Resolve a mode token such as 'auto' or 'check'

        Raises:
            ConfigurationError: If the token names no mode
        """
        try:
            return FixMode(value.lower())
        except ValueError:
            choices = ", ".join(mode.value for mode in FixMode)
            raise ConfigurationError(f"Unknown mode: {value} (choose from {choices})") from None

    @staticmethod
    def config_validate(config: Config) -> None:
        """
        Check value types, ranges and patterns

        Args:
            config: Configuration to check

        Raises:
            ConfigurationError: On the first invalid value found
        """
        fix = config.fix
        for key in ("force", "dry_run"):
            ConfigLoader._bool_check("fix", key, getattr(fix, key))
        ConfigLoader._int_check("fix", "max_retries", fix.max_retries, minimum=1)
        ConfigLoader._int_check("fix", "retry_delay", fix.retry_delay, minimum=0)

        hardware = config.hardware
        for key in _HARDWARE_STRING_KEYS:
            ConfigLoader._string_check("hardware", key, getattr(hardware, key))
        ConfigLoader._int_check("hardware", "min_displays", hardware.min_displays, minimum=1)
        for key in ("discrete_gpu_pattern", "integrated_gpu_pattern"):
            try:
                re.compile(getattr(hardware, key))
            except re.error as e:
                raise ConfigurationError(f"hardware.{key} is not a valid regex: {e}") from e

        kscreen = config.kscreen
        ConfigLoader._string_check("kscreen", "command", kscreen.command)
        patterns = kscreen.internal_patterns
        if not isinstance(patterns, list) or not patterns:
            raise ConfigurationError("kscreen.internal_patterns must name at least one pattern")
        for pattern in patterns:
            ConfigLoader._string_check("kscreen", "internal_patterns", pattern)
        timeout = kscreen.timeout_seconds
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                raise ConfigurationError(
                    f"kscreen.timeout_seconds must be a positive number when set (got {timeout!r})"
                )

        log_config = config.logging
        ConfigLoader._string_check("logging", "level", log_config.level)
        if not isinstance(logging.getLevelName(log_config.level.upper()), int):
            raise ConfigurationError(f"Unknown log level: {log_config.level}")
        if log_config.file is not None:
            ConfigLoader._string_check("logging", "file", log_config.file)
        ConfigLoader._string_check("logging", "format", log_config.format)
        for key in ("syslog", "verbose", "debug"):
            ConfigLoader._bool_check("logging", key, getattr(log_config, key))

    @staticmethod
    def _string_check(section: str, key: str, value: Any) -> None:
        if not isinstance(value, str) or not value:
            raise ConfigurationError(f"{section}.{key} must be a non-empty string (got {value!r})")

    @staticmethod
    def _bool_check(section: str, key: str, value: Any) -> None:
        if not isinstance(value, bool):
            raise ConfigurationError(f"{section}.{key} must be true or false (got {value!r})")

    @staticmethod
    def _int_check(section: str, key: str, value: Any, minimum: int) -> None:
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
            qualifier = "positive" if minimum >= 1 else "non-negative"
            raise ConfigurationError(f"{section}.{key} must be a {qualifier} integer (got {value!r})")

    @staticmethod
    def config_load(file_path: Optional[Path] = None) -> Config:
        """
        Load configuration from file

        Args:
            file_path: Optional path to config file. If None, searches standard
                locations and falls back to built-in defaults.

        Returns:
            Parsed Config object

        Raises:
            OSError: If an explicit config file does not exist or cannot be read
            ConfigurationError: If config file is invalid
        """
        if file_path is None:
            file_path = ConfigLoader.configFile_find()
            if file_path is None:
                return Config()

        data = ConfigLoader.yaml_load(file_path)
        return ConfigLoader.config_parse(data)

    @staticmethod
    def configWithOverrides_load(
        file_path: Optional[Path] = None,
        **overrides: Any
    ) -> Config:
        """
        Load configuration and apply command-line overrides

        Args:
            file_path: Optional path to config file
            **overrides: Key-value pairs to override config values. None means
                "not given on the command line" and leaves the config value.

        Returns:
            Config object with overrides applied and re-validated

        Example:
            config = ConfigLoader.configWithOverrides_load(
                mode="check",
                max_retries=5,
            )
        """
        config = ConfigLoader.config_load(file_path)

        def _given(key: str) -> bool:
            return key in overrides and overrides[key] is not None

        if _given("mode"):
            config.fix.mode = ConfigLoader.mode_parse(overrides["mode"])
        if _given("max_retries"):
            config.fix.max_retries = overrides["max_retries"]
        if _given("retry_delay"):
            config.fix.retry_delay = overrides["retry_delay"]

        # Boolean switches can only turn behavior on from the command line
        if overrides.get("force"):
            config.fix.force = True
        if overrides.get("dry_run"):
            config.fix.dry_run = True
        if overrides.get("syslog"):
            config.logging.syslog = True
        if overrides.get("verbose"):
            config.logging.verbose = True
        if overrides.get("debug"):
            config.logging.debug = True
            config.logging.verbose = True

        if _given("log_file"):
            config.logging.file = overrides["log_file"]

        ConfigLoader.config_validate(config)
        return config
