"""
brainlog CLI - offline-first note sync from the terminal.

Usage:
    brainlog auth register|login --email EMAIL [--password P]
    brainlog auth status
    brainlog sync [--json]
    brainlog notes list [--trashed]
    brainlog notes add NAME [--content C] [--folder] [--parent ID]
    brainlog notes trash ID [--restore]
    brainlog notes rm ID
    brainlog backup
    brainlog status
    brainlog logout
"""

import argparse
import asyncio
import logging
import sys

from brainlog import BrainlogClient
from brainlog.cli.commands import (
    cmd_auth,
    cmd_backup,
    cmd_logout,
    cmd_notes,
    cmd_status,
    cmd_sync,
)
from brainlog.cli.commands.credentials import (
    has_session_tokens,
    load_credentials,
    save_credentials,
)
from brainlog.config import get_settings
from brainlog.errors import BrainlogError
from brainlog.logging_config import setup_brainlog_logging

logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)

COMMANDS = {
    "auth": cmd_auth,
    "sync": cmd_sync,
    "notes": cmd_notes,
    "backup": cmd_backup,
    "status": cmd_status,
    "logout": cmd_logout,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brainlog",
        description="Offline-first note sync",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # auth
    p_auth = subparsers.add_parser("auth", help="Sign up, sign in, session status")
    auth_sub = p_auth.add_subparsers(dest="auth_action", required=True)
    for action, help_text in (("register", "Create an account"), ("login", "Sign in")):
        p = auth_sub.add_parser(action, help=help_text)
        p.add_argument("--email", "-e", required=True)
        p.add_argument("--password", "-p", help="Prompted for when omitted")
    auth_status = auth_sub.add_parser("status", help="Show the signed-in user")
    auth_status.add_argument("--json", "-j", action="store_true")

    # sync / backup / status / logout
    for name, help_text in (
        ("sync", "Merge cloud notes into local notes and pull the profile"),
        ("backup", "Upload every local note and the profile"),
        ("status", "Show session and local data summary"),
        ("logout", "Back up, sign out and clear local notes"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("--json", "-j", action="store_true")

    # notes
    p_notes = subparsers.add_parser("notes", help="Work with local notes")
    notes_sub = p_notes.add_subparsers(dest="notes_action", required=True)

    notes_list = notes_sub.add_parser("list", help="List notes")
    notes_list.add_argument("--trashed", "-t", action="store_true", help="Include trashed notes")
    notes_list.add_argument("--json", "-j", action="store_true")

    notes_add = notes_sub.add_parser("add", help="Create a note or folder")
    notes_add.add_argument("name")
    notes_add.add_argument("--content", "-c")
    notes_add.add_argument("--folder", "-f", action="store_true", help="Create a folder")
    notes_add.add_argument("--parent", help="Parent folder id")

    notes_trash = notes_sub.add_parser("trash", help="Move a note to the trash")
    notes_trash.add_argument("id")
    notes_trash.add_argument("--restore", action="store_true", help="Take it out of the trash")

    notes_rm = notes_sub.add_parser("rm", help="Delete a note locally and in the cloud")
    notes_rm.add_argument("id")

    return parser


async def run(args, settings=None) -> None:
    settings = settings or get_settings()
    data_dir = settings.resolved_data_dir()
    setup_brainlog_logging(settings.log_level, data_dir=data_dir)

    client = await BrainlogClient.create(settings)
    try:
        creds = load_credentials(data_dir)
        if has_session_tokens(creds):
            await client.auth.restore_session(creds["access_token"], creds["refresh_token"])

        await COMMANDS[args.command](args, client)

        # Refresh tokens rotate; keep the latest pair for the next invocation
        if creds and args.command not in ("logout", "auth"):
            tokens = await client.auth.session_tokens()
            if tokens:
                save_credentials({**creds, **tokens}, data_dir)
    finally:
        await client.aclose()


def main():
    args = build_parser().parse_args()
    try:
        asyncio.run(run(args))
    except BrainlogError as e:
        logger.error(f"{e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(1)


if __name__ == "__main__":
    main()
