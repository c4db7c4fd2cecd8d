import os
from dataclasses import dataclass
from typing import Optional

import yaml
from dotenv import find_dotenv, load_dotenv

DEFAULT_CONFIG_PATH = "config/config.yaml"


class ConfigurationError(Exception):
    """Raised when the configuration file is missing, unreadable or incomplete."""

    pass


@dataclass
class BlueskyCredentials:
    base_url: str
    identifier: str
    password: str = ""
    auth_factor_token: Optional[str] = None
    timeout: float = 30.0

    def __repr__(self) -> str:
        return f"BlueskyCredentials(base_url={self.base_url!r}, identifier={self.identifier!r})"


def load_config(config_file: str = DEFAULT_CONFIG_PATH):
    """
    Load configuration settings from a YAML file.

    This function reads and parses a YAML file to load configuration data into a
    Python dictionary. An empty file yields an empty dictionary.

    Args:
        config_file (str): The file path to the YAML configuration file.

    Returns:
        dict: A dictionary containing the parsed configuration data.

    Raises:
        ConfigurationError: If the file is not found, cannot be parsed, or does
            not contain a mapping at the top level.

    Example Usage:
        config = load_config("config/config.yaml")
        print(config["bluesky"]["identifier"])

    Notes:
        - The function uses `yaml.safe_load` to safely parse the YAML file,
          which avoids executing arbitrary Python code.
    """
    try:
        with open(config_file, encoding="utf-8") as file:
            config = yaml.safe_load(file)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file {config_file} not found.")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML file: {e}")

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration file {config_file} must contain a mapping.")
    return config


def resolve_credentials(config: dict, load_env: bool = True) -> BlueskyCredentials:
    """
    Build Bluesky credentials from the `bluesky` config section.

    Environment variables take precedence over YAML values:
      BSKY_BASE_URL, BSKY_HANDLE, BSKY_PASSWORD, BSKY_AUTH_FACTOR_TOKEN
    A `.env` file in the working directory is loaded first when `load_env` is True.

    Raises:
        ConfigurationError: If no identifier or password can be found.
    """
    if load_env:
        load_dotenv(find_dotenv(usecwd=True))

    section = config.get("bluesky", {}) or {}

    base_url = os.getenv("BSKY_BASE_URL") or section.get("base_url") or ""
    identifier = os.getenv("BSKY_HANDLE") or section.get("identifier") or ""
    password = os.getenv("BSKY_PASSWORD") or section.get("password") or ""
    auth_factor_token = os.getenv("BSKY_AUTH_FACTOR_TOKEN") or section.get("auth_factor_token")

    errors = []
    if not identifier:
        errors.append("Missing Bluesky identifier (bluesky.identifier or BSKY_HANDLE)")
    if not password:
        errors.append("Missing Bluesky password (bluesky.password or BSKY_PASSWORD)")
    if errors:
        raise ConfigurationError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    return BlueskyCredentials(
        base_url=str(base_url),
        identifier=str(identifier),
        password=str(password),
        auth_factor_token=str(auth_factor_token) if auth_factor_token else None,
        timeout=float(section.get("timeout", 30.0)),
    )
