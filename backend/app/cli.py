"""Management CLI.

Usage:
    python -m app.cli normalize <text>      # Print the Arabic search key
    python -m app.cli backup <file>         # Write a JSON backup
    python -m app.cli restore <file>        # Replace all data from a backup
"""

import asyncio
import json
import sys
from pathlib import Path

from app.database import async_session
from app.middleware.exceptions import KartatException
from app.services.backup import create_backup, restore_backup
from app.utils.arabic import normalize_arabic


def normalize(text: str):
    print(normalize_arabic(text))


async def backup(path: str):
    async with async_session() as db:
        document = await create_backup(db)
    Path(path).write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"  Wrote {len(document['cards'])} cards, {len(document['invoices'])} invoices to {path}")


async def restore(path: str):
    raw = Path(path).read_text(encoding="utf-8")
    async with async_session() as db:
        try:
            summary = await restore_backup(db, raw)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
    print(f"  Restored {summary.cards} cards, {summary.invoices} invoices")


def main(argv: list[str]) -> int:
    cmd = argv[1] if len(argv) > 1 else ""
    arg = " ".join(argv[2:])

    if cmd == "normalize" and arg:
        normalize(arg)
    elif cmd in ("backup", "restore") and arg:
        try:
            asyncio.run(backup(arg) if cmd == "backup" else restore(arg))
        except KartatException as exc:
            print(f"  FAILED: {exc.message}")
            return 1
    else:
        print("Usage: python -m app.cli [normalize <text>|backup <file>|restore <file>]")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
