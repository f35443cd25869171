"""Note commands for brainlog CLI."""

import json
import sys
from typing import TYPE_CHECKING

from brainlog.storage.schema import note_to_local
from brainlog.types import ItemType

if TYPE_CHECKING:
    from brainlog import BrainlogClient


async def cmd_notes(args, client: "BrainlogClient"):
    """Handle notes subcommands."""
    if args.notes_action == "list":
        notes = await client.list_notes(include_trashed=args.trashed)
        if args.json:
            print(json.dumps([note_to_local(n) for n in notes], indent=2))
            return
        if not notes:
            print("No notes.")
            return
        for note in sorted(notes, key=lambda n: (not n.is_folder, n.name or "")):
            icon = "📁" if note.is_folder else "📝"
            trashed = " (trashed)" if note.is_trashed else ""
            print(f"{icon} {note.name}{trashed}  [{note.id[:8]}]")

    elif args.notes_action == "add":
        item_type = ItemType.FOLDER.value if args.folder else ItemType.DOCUMENT.value
        note = await client.create_note(
            args.name, content=args.content or "", item_type=item_type, parent_id=args.parent
        )
        print(f"✓ Created {item_type} {note.name} [{note.id}]")

    elif args.notes_action == "trash":
        note = await client.trash_note(args.id, trashed=not args.restore)
        if note is None:
            print(f"✗ No note with id {args.id}")
            sys.exit(1)
        print(f"✓ {'Restored' if args.restore else 'Trashed'} {note.name}")

    elif args.notes_action == "rm":
        if not await client.delete_note(args.id):
            print(f"✗ No note with id {args.id}")
            sys.exit(1)
        print(f"✓ Deleted {args.id}")
