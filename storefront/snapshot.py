"""
Snapshot tool
- export: write the database image kept in local storage to a SQLite file
- import: load a SQLite file into local storage as the database image

Usage:
  python -m storefront.snapshot export --storage storefront-storage.json --out store.db
  python -m storefront.snapshot import --storage storefront-storage.json --db store.db
"""
import argparse
import json
import os
import sqlite3
from contextlib import closing

from .storage import LocalStorage

REQUIRED_TABLES = {"users", "products", "orders"}


def export_snapshot(storage_path: str, out_path: str, key: str = "3d-store-db"):
    if not os.path.exists(storage_path):
        raise FileNotFoundError(storage_path)
    saved = LocalStorage(storage_path).get_item(key)
    if not saved:
        raise RuntimeError(f"no database snapshot under {key!r}")

    with closing(sqlite3.connect(":memory:")) as src:
        src.deserialize(bytes(json.loads(saved)))
        with closing(sqlite3.connect(out_path)) as dst:
            src.backup(dst)


def import_snapshot(storage_path: str, db_path: str, key: str = "3d-store-db"):
    if db_path == ":memory:":
        raise ValueError("Use a file-backed DB for the snapshot import")

    if not os.path.exists(db_path):
        raise FileNotFoundError(db_path)

    with closing(sqlite3.connect(db_path)) as conn:
        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        missing = REQUIRED_TABLES - tables
        if missing:
            raise RuntimeError(f"tables missing; cannot import: {', '.join(sorted(missing))}")
        data = conn.serialize()

    LocalStorage(storage_path).set_item(key, json.dumps(list(data)))


def main(argv=None):
    parser = argparse.ArgumentParser(prog="storefront-snapshot")
    sub = parser.add_subparsers(dest="command", required=True)

    exp = sub.add_parser("export", help="Write the stored snapshot to a SQLite file")
    exp.add_argument("--storage", required=True, help="Path to the local storage JSON file")
    exp.add_argument("--out", required=True, help="Path of the SQLite file to write")

    imp = sub.add_parser("import", help="Replace the stored snapshot with a SQLite file")
    imp.add_argument("--storage", required=True, help="Path to the local storage JSON file")
    imp.add_argument("--db", required=True, help="Path to SQLite database file")

    parser.add_argument("--key", default="3d-store-db", help="Local storage key of the snapshot")
    args = parser.parse_args(argv)

    if args.command == "export":
        export_snapshot(args.storage, args.out, key=args.key)
    else:
        import_snapshot(args.storage, args.db, key=args.key)

if __name__ == "__main__":
    main()
