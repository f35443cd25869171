"""Authentication commands for brainlog CLI."""

import getpass
import json
import logging
import sys
from typing import TYPE_CHECKING

from brainlog.cli.commands.credentials import save_credentials

if TYPE_CHECKING:
    from brainlog import BrainlogClient

logger = logging.getLogger(__name__)


def _prompt_password(args) -> str:
    if args.password:
        return args.password
    try:
        password = getpass.getpass("Password: ")
    except (EOFError, KeyboardInterrupt):
        print("\nAborted.")
        sys.exit(1)
    if not password:
        print("✗ Password is required")
        sys.exit(1)
    return password


async def _remember_session(client: "BrainlogClient", email: str):
    tokens = await client.auth.session_tokens()
    if tokens:
        return save_credentials({"email": email, **tokens}, client.settings.resolved_data_dir())
    return None


async def cmd_auth(args, client: "BrainlogClient"):
    """Handle auth subcommands."""
    if args.auth_action == "status":
        user = await client.current_user()
        if args.json:
            print(json.dumps({"signed_in": user is not None, "user_id": user.id if user else None}))
        elif user:
            print(f"✓ Signed in as {user.email or user.id}")
        else:
            print("Not signed in (run `brainlog auth login`)")
        return

    password = _prompt_password(args)
    if args.auth_action == "register":
        result = await client.sign_up(args.email, password)
        action = "Registration"
    else:
        result = await client.sign_in(args.email, password)
        action = "Login"

    if result.error:
        print(f"✗ {action} failed: {result.error}")
        sys.exit(1)

    if result.session is None:
        # Sign-up with email confirmation enabled returns a user but no session
        print(f"✓ {action} successful. Confirm your email, then run `brainlog auth login`.")
        return

    creds_path = await _remember_session(client, args.email)
    print(f"✓ {action} successful!")
    print(f"  User ID:  {result.user.id}")
    if creds_path:
        print(f"Credentials saved to {creds_path}")

    sync_result = await client.sync()
    print(f"  Synced {sync_result.total} notes ({sync_result.pulled} from cloud)")
