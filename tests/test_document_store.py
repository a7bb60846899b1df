from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from persistence.disk_store import DiskJsonDocumentStore
from persistence.document import Document
from persistence.errors import StorageMalformed, StorageUnreadable, StorageUnwritable
from persistence.locks import DocumentWriterLocks
from persistence.paths import bootstrap_workspace
from persistence.resource_state import DiskResourceRepository
from security import verify_password


def test_create_initial_preserves_declared_order_without_users(db_path):
    store = DiskJsonDocumentStore(db_path)
    store.create_initial(["posts", "comments", "albums"])

    doc = store.load()
    assert [b.resource for b in doc.resources] == ["posts", "comments", "albums"]
    assert all(b.items == [] for b in doc.resources)
    assert doc.users is None
    assert "users" not in json.loads(db_path.read_text())


def test_bootstrap_seeds_hashed_admin_only_with_authorization(sandbox_project, auth_config, make_config):
    store = bootstrap_workspace(auth_config, sandbox_project)
    users = store.load().users
    assert users is not None and len(users) == 1
    assert users[0].username == "admin"
    assert users[0].password != "password"
    assert verify_password("password", users[0].password)

    other = sandbox_project / "other"
    store = bootstrap_workspace(make_config(json_database_name="plain.json"), other)
    assert store.load().users is None


def test_bootstrap_keeps_existing_database(sandbox_project, make_config):
    store = bootstrap_workspace(make_config(("posts",)), sandbox_project)
    DiskResourceRepository(store).create_item("posts", {"title": "kept"})

    store = bootstrap_workspace(make_config(("posts", "comments")), sandbox_project)
    doc = store.load()
    assert [b.resource for b in doc.resources] == ["posts"]
    assert doc.resources[0].items[0]["title"] == "kept"


def test_load_missing_file_is_unreadable(db_path):
    with pytest.raises(StorageUnreadable):
        DiskJsonDocumentStore(db_path).load()


@pytest.mark.parametrize(
    "content",
    ["{not json", "", "[]", '{"users": []}', '{"resources": {}}', '{"resources": [{"items": []}]}'],
)
def test_load_rejects_malformed_documents(db_path, content):
    db_path.write_text(content)
    with pytest.raises(StorageMalformed):
        DiskJsonDocumentStore(db_path).load()


def test_load_reports_malformed_users(db_path):
    db_path.write_text(json.dumps({"resources": [], "users": "nope"}))
    with pytest.raises(StorageMalformed) as exc:
        DiskJsonDocumentStore(db_path).load()
    assert exc.value.message == "Users format is incorrect"


def test_save_of_load_is_a_noop_on_file_content(db_path):
    store = DiskJsonDocumentStore(db_path)
    store.create_initial(["posts", "comments"])
    repo = DiskResourceRepository(store)
    repo.create_item("posts", {"title": "hi", "tags": ["a", "b"], "meta": {"z": 1, "a": None}})

    before = db_path.read_bytes()
    store.save(store.load())
    assert db_path.read_bytes() == before


def test_load_of_save_reconstructs_document(db_path):
    doc = Document.from_disk_doc(
        {
            "resources": [
                {"resource": "posts", "items": [{"id": "1", "title": "t", "n": 2.5, "ok": True, "x": None}]},
                {"resource": "comments", "items": []},
            ],
            "users": [{"username": "a", "password": "hash"}],
        }
    )
    store = DiskJsonDocumentStore(db_path)
    store.save(doc)
    assert store.load() == doc


def test_save_leaves_no_temp_files(sandbox_project, db_path):
    store = DiskJsonDocumentStore(db_path)
    store.create_initial(["posts"])
    store.save(store.load())
    assert [p.name for p in sandbox_project.iterdir()] == ["database.json"]


def test_transaction_does_not_save_when_block_fails(db_path):
    store = DiskJsonDocumentStore(db_path)
    store.create_initial(["posts"])
    before = db_path.read_bytes()

    with pytest.raises(RuntimeError):
        with store.transaction() as doc:
            doc.resources[0].items.append({"id": "x"})
            raise RuntimeError("boom")

    assert db_path.read_bytes() == before


def test_concurrent_writers_do_not_lose_updates(db_path):
    store = DiskJsonDocumentStore(db_path)
    store.create_initial(["posts", "comments"])
    repo = DiskResourceRepository(store)

    def _worker(name: str, n: int) -> None:
        for i in range(n):
            repo.create_item(name, {"n": str(i)})

    threads = [threading.Thread(target=_worker, args=(name, 10)) for name in ("posts", "comments") for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    posts = repo.list_items("posts")
    comments = repo.list_items("comments")
    assert len(posts) == 40
    assert len(comments) == 40
    ids = [i["id"] for i in posts + comments]
    assert len(set(ids)) == len(ids)


def test_failed_write_keeps_previous_file_and_cleans_up(monkeypatch, sandbox_project, db_path):
    store = DiskJsonDocumentStore(db_path)
    store.create_initial(["posts"])
    before = db_path.read_bytes()

    def _fail_replace(self, target):
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", _fail_replace)

    with pytest.raises(StorageUnwritable):
        with store.transaction() as doc:
            doc.resources[0].items.append({"id": "x", "title": "lost"})

    assert db_path.read_bytes() == before
    assert [p.name for p in sandbox_project.iterdir()] == ["database.json"]
    assert store.load().resources[0].items == []


def test_writer_locks_are_per_resolved_path_and_reentrant(sandbox_project):
    locks = DocumentWriterLocks()
    (sandbox_project / "data").mkdir()

    same = locks.lock_for(sandbox_project / "db.json")
    assert locks.lock_for(sandbox_project / "data" / ".." / "db.json") is same
    assert locks.lock_for(sandbox_project / "other.json") is not same

    with locks.writer(sandbox_project / "db.json"):
        with locks.writer(sandbox_project / "db.json"):
            pass
    assert same.acquire(blocking=False)
    same.release()
