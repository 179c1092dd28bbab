"""Configuration Management with Pydantic.

This module implements configuration models using Pydantic for parsing and
validation of YAML/JSON configuration files with environment variable overrides.
"""

import os
import threading
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field

# Initialize logger
logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_NAMES = ("deptree.yaml", "deptree.yml", "deptree.json")
TRUTHY_VALUES = ("true", "1", "yes")


class BuildConfig(BaseModel):
    """Settings that change how a dependency tree is built.

    Attributes:
        create_dependency_keys: Create a leaf node for every key that only ever
            appears inside a dependency list. When False such keys are reported
            as missing dependencies.
        reject_self_dependency: Record a self dependency error on a key listing
            itself instead of creating a self edge.
    """

    create_dependency_keys: bool = Field(
        default=False,
        description="Create nodes for keys that only appear as dependencies",
    )
    reject_self_dependency: bool = Field(
        default=True,
        description="Flag keys that depend on themselves",
    )


class TreeConfig(BaseModel):
    """Top-level configuration for the dependency tree engine.

    Attributes:
        build: Tree build settings
        logging_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render logs as JSON (True) or for the console (False)
    """

    build: BuildConfig = Field(default_factory=BuildConfig)
    logging_level: str = Field(
        default="INFO",
        description="Logging level",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON",
    )

    model_config = {"str_strip_whitespace": True}

    @classmethod
    def from_yaml(cls, path: str | Path) -> "TreeConfig":
        """Load configuration from a YAML file.

        JSON is a subset of YAML, so ``.json`` files load through here as well.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Parsed and validated TreeConfig instance

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If configuration is empty or not valid YAML
        """
        config_path = Path(path)

        if not config_path.exists():
            msg = f"Configuration file not found: {config_path}"
            raise FileNotFoundError(msg)

        logger.info("loading_configuration", path=str(config_path))

        try:
            with config_path.open() as f:
                config_data = yaml.safe_load(f)

            if not config_data:
                msg = "Configuration file is empty"
                raise ValueError(msg)

            config_data = cls._apply_env_overrides(config_data)
            config = cls(**config_data)
        except yaml.YAMLError as e:
            logger.exception("yaml_parse_error", error=str(e), path=str(config_path))
            msg = f"Invalid YAML in configuration file: {e}"
            raise ValueError(msg) from e
        else:
            logger.info(
                "configuration_loaded",
                logging_level=config.logging_level,
                create_dependency_keys=config.build.create_dependency_keys,
                reject_self_dependency=config.build.reject_self_dependency,
            )

            return config

    @classmethod
    def _apply_env_overrides(cls, config_data: dict) -> dict:
        """Apply environment variable overrides to configuration.

        Environment variables follow the pattern: DEPTREE_<SECTION>_<KEY>
        Example: DEPTREE_BUILD_CREATE_DEPENDENCY_KEYS, DEPTREE_LOGGING_LEVEL

        Args:
            config_data: Base configuration dictionary from file

        Returns:
            Configuration dictionary with environment overrides applied
        """
        env_overrides = {
            ("build", "create_dependency_keys"): "DEPTREE_BUILD_CREATE_DEPENDENCY_KEYS",
            ("build", "reject_self_dependency"): "DEPTREE_BUILD_REJECT_SELF_DEPENDENCY",
            ("logging_level",): "DEPTREE_LOGGING_LEVEL",
            ("json_logs",): "DEPTREE_JSON_LOGS",
        }
        boolean_vars = {
            "DEPTREE_BUILD_CREATE_DEPENDENCY_KEYS",
            "DEPTREE_BUILD_REJECT_SELF_DEPENDENCY",
            "DEPTREE_JSON_LOGS",
        }

        for path, env_var in env_overrides.items():
            value = os.environ.get(env_var)
            if value is None:
                continue

            current = config_data
            for key in path[:-1]:
                if key not in current or current[key] is None:
                    current[key] = {}
                current = current[key]

            if env_var in boolean_vars:
                current[path[-1]] = value.lower() in TRUTHY_VALUES
            else:
                current[path[-1]] = value.upper()

            logger.debug(
                "env_override_applied",
                env_var=env_var,
                config_path=".".join(path),
            )

        return config_data

    def validate_config(self) -> list[str]:
        """Validate configuration and return list of warnings.

        Returns:
            List of validation warning messages (empty if no warnings)
        """
        warnings = []

        if not self.build.reject_self_dependency:
            warnings.append(
                "Self dependencies are not rejected - a key listing itself "
                "will not be reported as circular",
            )

        if self.build.create_dependency_keys:
            warnings.append(
                "Dependency-only keys are created as leaf nodes - "
                "typos in dependency lists will not be reported as missing",
            )

        if self.logging_level == "DEBUG":
            warnings.append("DEBUG logging emits one event per node and edge on every build")

        return warnings


class ConfigManager:
    """Configuration manager using singleton pattern."""

    _instance: TreeConfig | None = None
    _init_lock: threading.Lock = threading.Lock()

    @classmethod
    def load_config(cls, config_path: str | Path | None = None) -> TreeConfig:
        """Load configuration from file.

        Args:
            config_path: Path to configuration file. If None, looks for deptree.yaml,
                        deptree.yml or deptree.json in current directory.

        Returns:
            Loaded TreeConfig instance

        Raises:
            FileNotFoundError: If config file not found
            ValueError: If config file is invalid
        """
        if config_path is None:
            for default_name in DEFAULT_CONFIG_NAMES:
                default_path = Path(default_name)
                if default_path.exists():
                    config_path = default_path
                    break
            else:
                msg = (
                    "No configuration file found. Expected deptree.yaml, deptree.yml, "
                    "or deptree.json"
                )
                raise FileNotFoundError(msg)

        return TreeConfig.from_yaml(config_path)

    @classmethod
    def get_config(
        cls,
        config_path: str | Path | None = None,
        reload: bool = False,
    ) -> TreeConfig:
        """Get configuration instance (singleton pattern).

        Uses double-checked locking so concurrent first calls load only once.

        Args:
            config_path: Path to configuration file. Only used on first call or when reload=True.
            reload: If True, force reload configuration from file.

        Returns:
            TreeConfig instance
        """
        if cls._instance is not None and not reload:
            return cls._instance

        with cls._init_lock:
            if cls._instance is None or reload:
                cls._instance = cls.load_config(config_path)

            return cls._instance

    @classmethod
    def reset_config(cls) -> None:
        """Reset the configuration instance."""
        cls._instance = None


def load_config(config_path: str | Path | None = None) -> TreeConfig:
    """Load configuration from file."""
    return ConfigManager.load_config(config_path)


def get_config(config_path: str | Path | None = None, reload: bool = False) -> TreeConfig:
    """Get configuration instance (singleton pattern)."""
    return ConfigManager.get_config(config_path, reload)


def reset_config() -> None:
    """Reset the configuration instance."""
    ConfigManager.reset_config()


__all__ = [
    "BuildConfig",
    "ConfigManager",
    "TreeConfig",
    "get_config",
    "load_config",
    "reset_config",
]
