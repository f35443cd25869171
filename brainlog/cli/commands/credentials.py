"""Session credential storage for the brainlog CLI.

The Supabase client keeps its session in memory, so the CLI persists the
access/refresh tokens between invocations in ``<data dir>/credentials.json``.
Every helper takes the data directory of the active ``BrainlogSettings``;
without one it resolves the directory from the cached settings.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from brainlog.utils import get_brainlog_home

logger = logging.getLogger(__name__)

CREDENTIALS_FILE = "credentials.json"
TOKEN_KEYS = ("access_token", "refresh_token")

DataDir = Optional[Union[str, Path]]


def get_credentials_path(data_dir: DataDir = None) -> Path:
    return get_brainlog_home(data_dir) / CREDENTIALS_FILE


def load_credentials(data_dir: DataDir = None) -> Optional[Dict[str, str]]:
    """Load stored credentials, or None if missing, unreadable or not an object."""
    creds_path = get_credentials_path(data_dir)
    if not creds_path.exists():
        return None
    try:
        creds = json.loads(creds_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable credentials file {creds_path}: {e}")
        return None
    if not isinstance(creds, dict):
        logger.warning(f"Ignoring credentials file {creds_path}: not a JSON object")
        return None
    return creds


def has_session_tokens(creds: Optional[Dict[str, str]]) -> bool:
    return bool(creds) and all(creds.get(key) for key in TOKEN_KEYS)


def save_credentials(credentials: Dict[str, str], data_dir: DataDir = None) -> Path:
    """Write credentials readable by the owner only. Returns the file path."""
    creds_path = get_credentials_path(data_dir)
    creds_path.parent.mkdir(parents=True, exist_ok=True)
    creds_path.write_text(json.dumps(credentials, indent=2), encoding="utf-8")
    creds_path.chmod(0o600)
    return creds_path


def clear_credentials(data_dir: DataDir = None) -> bool:
    """Remove the credentials file. Returns True if one existed."""
    creds_path = get_credentials_path(data_dir)
    if not creds_path.exists():
        return False
    creds_path.unlink()
    logger.debug(f"Removed {creds_path}")
    return True
