"""Sync, backup, status and logout commands for brainlog CLI."""

import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING

from brainlog.cli.commands.credentials import clear_credentials

if TYPE_CHECKING:
    from brainlog import BrainlogClient

logger = logging.getLogger(__name__)


async def cmd_sync(args, client: "BrainlogClient"):
    """Merge cloud notes into the local snapshot and pull the profile."""
    result = await client.sync()

    if args.json:
        print(json.dumps(asdict(result), indent=2, default=str))
        return

    if not result.synced:
        print("Not signed in - working offline (run `brainlog auth login`)")
        return

    print(f"✓ Synced {result.total} notes")
    print(f"  Pulled from cloud: {result.pulled}")
    print(f"  Kept local:        {result.kept_local}")
    print(f"  Profile:           {result.profile.status.value}")
    for error in result.errors + result.profile.errors:
        print(f"  ⚠ {error}")


async def cmd_backup(args, client: "BrainlogClient"):
    """Upload every local note and the profile."""
    result = await client.upload_all()

    if args.json:
        print(json.dumps(asdict(result), indent=2, default=str))
        return

    if not result.attempted:
        print("Nothing to back up (not signed in or no local notes)")
        return
    if result.success:
        print(f"✓ Backed up {result.uploaded} notes")
    else:
        print(f"✗ Backup finished with errors ({result.uploaded} notes sent)")
        for error in result.errors:
            print(f"  ⚠ {error}")


async def cmd_status(args, client: "BrainlogClient"):
    status = await client.get_status()

    if args.json:
        print(json.dumps(status, indent=2))
        return

    if status["signed_in"]:
        print(f"Signed in as {status['email'] or status['user_id']}")
    else:
        print("Not signed in")
    print(f"  Notes:      {status['notes']} ({status['trashed']} trashed)")
    print(f"  Theme:      {status['theme']} ({status['resolved_theme']})")
    print(f"  View mode:  {status['view_mode']}")
    print(f"  Daily goal: {status['daily_goal']}")


async def cmd_logout(args, client: "BrainlogClient"):
    """Back up, sign out and wipe local session data."""
    result = await client.logout()
    if result.wiped:
        clear_credentials(client.settings.resolved_data_dir())

    if args.json:
        print(json.dumps(asdict(result), indent=2, default=str))
        return

    if not result.wiped:
        print("✗ Backup failed - still signed in, local data kept")
        for error in result.errors:
            print(f"  ⚠ {error}")
        return

    if result.backup.attempted:
        state = "ok" if result.backup.success else "FAILED"
        print(f"  Backup of {result.backup.uploaded} notes: {state}")
    print("✓ Logged out, local notes cleared")
