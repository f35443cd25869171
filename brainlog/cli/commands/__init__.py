"""CLI command handlers."""

from .auth import cmd_auth
from .notes import cmd_notes
from .sync import cmd_backup, cmd_logout, cmd_status, cmd_sync

__all__ = ["cmd_auth", "cmd_backup", "cmd_logout", "cmd_notes", "cmd_status", "cmd_sync"]
