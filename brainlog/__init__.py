"""
brainlog - offline-first note sync.

Keeps a local note snapshot and profile settings reconciled with a Supabase
backend using last-writer-wins on modification time.
"""

from importlib.metadata import PackageNotFoundError, version

from .client import BrainlogClient
from .types import NoteItem, SyncResult

try:
    __version__ = version("brainlog")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["BrainlogClient", "NoteItem", "SyncResult"]
