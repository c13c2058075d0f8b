import os
import sqlite3
from contextlib import closing

import pytest

from storefront import crud
from storefront.config import Settings
from storefront.context import create_context
from storefront.snapshot import export_snapshot, import_snapshot, main


def make_storage_file(tmp_path):
    path = str(tmp_path / "storage.json")
    ctx = create_context(Settings(storage_path=path, bcrypt_rounds=4))
    ctx.close()
    return path


def test_export_writes_sqlite_file(tmp_path):
    storage_path = make_storage_file(tmp_path)
    out = str(tmp_path / "store.db")
    export_snapshot(storage_path, out)

    with closing(sqlite3.connect(out)) as conn:
        assert conn.execute("SELECT COUNT(*) FROM products").fetchone()[0] == 6
        assert conn.execute("SELECT role FROM users").fetchall() == [("admin",)]


def test_import_replaces_snapshot(tmp_path):
    storage_path = make_storage_file(tmp_path)
    db_path = str(tmp_path / "edited.db")
    main(["export", "--storage", storage_path, "--out", db_path])

    with closing(sqlite3.connect(db_path)) as conn:
        conn.execute("DELETE FROM products WHERE id = 6")
        conn.commit()

    main(["import", "--storage", storage_path, "--db", db_path])

    ctx = create_context(Settings(storage_path=storage_path, bcrypt_rounds=4))
    try:
        ids = [p.id for p in crud.list_products(ctx.store)]
        assert ids == [5, 4, 3, 2, 1]
    finally:
        ctx.close()


def test_import_rejects_foreign_database(tmp_path):
    db_path = str(tmp_path / "other.db")
    with closing(sqlite3.connect(db_path)) as conn:
        conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY)")
        conn.commit()
    with pytest.raises(RuntimeError):
        import_snapshot(str(tmp_path / "storage.json"), db_path)
    assert not os.path.exists(tmp_path / "storage.json")


def test_export_without_snapshot(tmp_path):
    with pytest.raises(FileNotFoundError):
        export_snapshot(str(tmp_path / "missing.json"), str(tmp_path / "out.db"))
