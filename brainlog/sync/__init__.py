"""Sync components: note reconciliation, profile sync and the logout sequence."""

from .profile import ProfileSync
from .reconciler import Reconciler, merge_notes
from .session import SessionLifecycle

__all__ = ["ProfileSync", "Reconciler", "SessionLifecycle", "merge_notes"]
