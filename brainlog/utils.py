"""Filesystem helpers for brainlog."""

from pathlib import Path
from typing import Optional, Union


def default_brainlog_home() -> Path:
    return Path.home() / ".brainlog"


def get_brainlog_home(data_dir: Optional[Union[str, Path]] = None) -> Path:
    """Get the brainlog data directory.

    An explicit ``data_dir`` wins. Otherwise the configured
    ``BrainlogSettings.data_dir`` is used, which covers ``BRAINLOG_DATA_DIR``
    from the environment or ``.env``. The fallback is ``~/.brainlog``.
    """
    if data_dir is None:
        from .config import get_settings

        data_dir = get_settings().data_dir
    if data_dir:
        return Path(data_dir).expanduser()
    return default_brainlog_home()
