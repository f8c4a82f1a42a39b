#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Optional

import logging
import sys

import toml
import yaml

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("jsan")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. JSAN_CONFIG environment variable
    2. ~/.jsan/ directory
    """
    if 'JSAN_CONFIG' in os.environ:
        path = Path(os.environ['JSAN_CONFIG'])
        if path.exists():
            return path

    jsan_dir = Path.home() / '.jsan'
    for filename in CONFIG_FILENAMES:
        path = jsan_dir / filename
        if path.exists() and path.stat().st_size > 10:  # Not empty/trivial
            return path

    # If no file exists, return default path for saving
    return jsan_dir / 'config.json'


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            config = merge_configs(config, file_config)
        except Exception as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def save_config(config):
    """Save configuration to file."""
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        if config_path.suffix.lower() in ['.toml']:
            # tomllib is read-only
            with open(config_path, 'w') as f:
                toml.dump(config, f)
        elif config_path.suffix.lower() in ['.yaml', '.yml']:
            with open(config_path, 'w') as f:
                yaml.safe_dump(config, f, default_flow_style=False)
        else:
            with open(config_path, 'w') as f:
                json.dump(config, f, indent=2)

        logger.debug(f"Configuration saved to {config_path}")
    except Exception as e:
        logger.error(f"Error saving config to {config_path}: {e}")


def get_default_config():
    """Get default configuration."""
    return {
        "index": {
            "path": "~/.jsan/index.db",
        },
        "transport": {
            "mirror": "http://openjsan.org",
            "timeout_seconds": 30,
        },
        "install": {
            "prefix": "~/.jsan/lib",
            "mirror_dir": "~/.jsan/mirror",
        },
        "shell": {
            "prompt": "jsan> ",
            "history_file": "~/.jsan/history",
        },
        "logging": {
            "level": "INFO",
        },
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def _coerce_value(value: str) -> Any:
    if value.lower() in ('true', 'yes', 'on'):
        return True
    if value.lower() in ('false', 'no', 'off'):
        return False
    if value.isdigit():
        return int(value)
    return value


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: JSAN_SECTION_KEY
    For example: JSAN_TRANSPORT_TIMEOUT_SECONDS=60
    """
    env_prefix = "JSAN_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == 'JSAN_CONFIG':
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')
        typed_value = _coerce_value(value)

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest config key that is a prefix of the remaining parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i : i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if not isinstance(current_level[matched_key], dict):
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return config


def configure_logging(config: dict) -> None:
    """Apply the configured log level to the jsan logger."""
    level_name = str(config.get('logging', {}).get('level', 'INFO')).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        logger.warning(f"Unknown log level '{level_name}', using INFO")
        level = logging.INFO
    logger.setLevel(level)


def config_path_value(config: dict, section: str, key: str) -> Path:
    """Read a path-valued option and expand ``~``."""
    return Path(str(config[section][key])).expanduser()


class ConfigStore:
    """
    Dotted-key access to the configuration file.

    Backs the shell's ``conf get`` and ``conf set`` commands. Values
    written with ``set`` are persisted immediately via ``save_config``.
    """

    def __init__(self, config: Optional[dict] = None, persist: bool = True):
        self.config = config if config is not None else load_config()
        self.persist = persist

    def get(self, option: str) -> Any:
        """Return the value at ``option`` or raise KeyError."""
        node: Any = self.config
        for part in option.split('.'):
            if not isinstance(node, dict) or part not in node:
                raise KeyError(option)
            node = node[part]
        return node

    def set(self, option: str, value: str) -> Any:
        """Set ``option`` to ``value``, creating sections as needed."""
        parts = option.split('.')
        node = self.config
        for part in parts[:-1]:
            child = node.get(part)
            if child is None:
                child = node[part] = {}
            elif not isinstance(child, dict):
                raise KeyError(option)
            node = child

        if isinstance(node.get(parts[-1]), dict):
            raise KeyError(option)

        typed_value = _coerce_value(value)
        node[parts[-1]] = typed_value
        if self.persist:
            save_config(self.config)
        return typed_value
