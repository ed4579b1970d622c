"""One-off migration script: local JSON store -> remote document store.

Usage:
  DATABASE_URL=postgresql+psycopg://... python scripts/migrate_local_to_remote.py [--source data.json]
"""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
from pathlib import Path
import sys

# Make the spincity package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from spincity.core.config import get_settings  # noqa: E402
from spincity.core.log import configure_logging  # noqa: E402
from spincity.repositories.factory import build_local_stores, build_remote_stores  # noqa: E402
from spincity.services.backup_service import BackupService  # noqa: E402
from spincity.services.settings_service import SettingsStore  # noqa: E402
from spincity.services.vendor_service import VendorService  # noqa: E402
from spincity.domain.entities import INVENTORY, VENDORS  # noqa: E402


async def migrate(source: Path) -> None:
    settings = get_settings()
    if not settings.remote_enabled:
        raise SystemExit("DATABASE_URL must point at the remote document store.")
    if not source.exists():
        raise SystemExit(f"File not found: {source}")

    local = build_local_stores(dataclasses.replace(settings, local_store_path=source))
    remote = build_remote_stores(settings)

    snapshot = await BackupService(local, SettingsStore(local.kv)).export_backup()
    result = await BackupService(remote, SettingsStore(remote.kv)).import_backup(snapshot)
    if not result.success:
        raise SystemExit(result.message)
    print(result.message)

    linked = await VendorService(remote.collection(VENDORS), remote.collection(INVENTORY)).link_inventory_vendors()
    print(f"Linked {linked} inventory item(s) to vendor records.")


def main() -> None:
    ap = argparse.ArgumentParser(description="Copy the local JSON store into the remote document store")
    ap.add_argument("--source", help="path of the local store (default: LOCAL_STORE_PATH)")
    args = ap.parse_args()
    configure_logging(get_settings().log_level)
    source = Path(args.source) if args.source else get_settings().local_store_path
    asyncio.run(migrate(source))


if __name__ == "__main__":
    main()
