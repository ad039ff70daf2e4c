"""Conversation API configuration and token storage helpers.

Shared by the session, the fetchers and the CLI auth commands.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".conversation-digest" / "config.json"
KEYCHAIN_SERVICE = "conversation-digest"
KEYCHAIN_ACCOUNT = "conversation-digest-token"

API_URL_ENV = "CONVERSATION_DIGEST_API_URL"
TOKEN_ENV = "CONVERSATION_DIGEST_TOKEN"

# Default API URL — override via config file, env or `conversation-digest login --api-url`
DEFAULT_API_URL = "http://ui-developer-backend.herokuapp.com/api"
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_WORKERS = 4


def default_api_config() -> Dict[str, Any]:
    return {
        "api_url": DEFAULT_API_URL,
        "timeout": DEFAULT_TIMEOUT,
        "max_workers": DEFAULT_MAX_WORKERS,
    }


def load_api_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load API config (URL, timeout, worker count).

    Values missing from the file fall back to defaults. The
    CONVERSATION_DIGEST_API_URL environment variable wins over both.
    """
    config_path = path or DEFAULT_CONFIG_PATH
    config = default_api_config()

    if config_path.exists():
        try:
            stored = json.loads(config_path.read_text())
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        else:
            if isinstance(stored, dict):
                config.update(stored)

    env_url = os.environ.get(API_URL_ENV)
    if env_url:
        config["api_url"] = env_url

    return config


def save_api_config(config: Dict[str, Any], path: Optional[Path] = None):
    """Save config to disk."""
    config_path = path or DEFAULT_CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config, indent=2))


def store_token(token: str) -> bool:
    """Store the API bearer token in macOS Keychain."""
    try:
        subprocess.run(
            ["security", "delete-generic-password", "-a", KEYCHAIN_ACCOUNT, "-s", KEYCHAIN_SERVICE],
            capture_output=True,
        )
        result = subprocess.run(
            ["security", "add-generic-password", "-a", KEYCHAIN_ACCOUNT, "-s", KEYCHAIN_SERVICE, "-w", token],
            capture_output=True, text=True,
        )
    except FileNotFoundError:
        logger.warning("Keychain is not available on this system; export %s instead", TOKEN_ENV)
        return False
    return result.returncode == 0


def load_token() -> Optional[str]:
    """Load the API token from the environment or macOS Keychain.

    Checks the env var first, then Keychain (set via `conversation-digest login`).
    """
    token = os.environ.get(TOKEN_ENV)
    if token:
        return token

    try:
        result = subprocess.run(
            ["security", "find-generic-password", "-a", KEYCHAIN_ACCOUNT, "-s", KEYCHAIN_SERVICE, "-w"],
            capture_output=True, text=True,
        )
    except FileNotFoundError:
        return None

    if result.returncode == 0 and result.stdout.strip():
        return result.stdout.strip()
    return None


def clear_token():
    """Remove the stored token from Keychain."""
    try:
        subprocess.run(
            ["security", "delete-generic-password", "-a", KEYCHAIN_ACCOUNT, "-s", KEYCHAIN_SERVICE],
            capture_output=True,
        )
    except FileNotFoundError:
        pass
