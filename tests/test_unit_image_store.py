import re
import pytest

from posthub.errors import StorageError
from posthub.services.image_store import ImageStore, generate_filename


def test_generate_filename_keeps_extension():
    name = generate_filename("holiday.PNG")
    assert re.fullmatch(r"images-\d+-\d+\.PNG", name)


def test_generate_filename_without_extension():
    assert re.fullmatch(r"images-\d+-\d+", generate_filename("README"))
    assert re.fullmatch(r"images-\d+-\d+", generate_filename(None))


def test_generate_filename_strips_client_directories():
    name = generate_filename("C:\\photos\\cat.jpeg")
    assert name.endswith(".jpeg")
    assert "\\" not in name and "/" not in name


def test_store_creates_root_and_returns_public_path(tmp_path):
    root = tmp_path / "nested" / "uploads"
    store = ImageStore(root)
    path = store.store(b"png-bytes", "x.png")
    assert path.startswith("/uploads/images-") and path.endswith(".png")
    assert (root / path.split("/")[-1]).read_bytes() == b"png-bytes"


def test_store_many_yields_distinct_names(tmp_path):
    store = ImageStore(tmp_path)
    paths = store.store_many([(b"a", "a.png") for _ in range(25)])
    assert len(set(paths)) == 25
    assert len(list(tmp_path.iterdir())) == 25


def test_store_retries_on_name_collision(tmp_path, monkeypatch):
    import posthub.services.image_store as module
    names = iter(["images-1-1.png", "images-1-1.png", "images-1-2.png"])
    monkeypatch.setattr(module, "generate_filename", lambda original, field_name="images": next(names))
    store = ImageStore(tmp_path)
    assert store.store(b"first", "a.png") == "/uploads/images-1-1.png"
    assert store.store(b"second", "b.png") == "/uploads/images-1-2.png"
    assert (tmp_path / "images-1-1.png").read_bytes() == b"first"


def test_store_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    store = ImageStore(blocker / "uploads")
    with pytest.raises(StorageError):
        store.store(b"x", "x.png")


def test_store_many_rolls_back_partial_batch(tmp_path, monkeypatch):
    store = ImageStore(tmp_path)
    original = ImageStore.store
    calls = {"n": 0}

    def flaky(self, data, name):
        calls["n"] += 1
        if calls["n"] == 3:
            raise StorageError("disk full")
        return original(self, data, name)

    monkeypatch.setattr(ImageStore, "store", flaky)
    with pytest.raises(StorageError):
        store.store_many([(b"a", "a.png"), (b"b", "b.png"), (b"c", "c.png")])
    assert list(tmp_path.iterdir()) == []


def test_discard_removes_only_upload_paths(tmp_path):
    store = ImageStore(tmp_path)
    kept = tmp_path.parent / "outside.txt"
    kept.write_text("keep me")
    path = store.store(b"x", "x.png")
    removed = store.discard([path, "/uploads/missing.png", "/uploads/../outside.txt", "/etc/passwd"])
    assert removed == 1
    assert kept.exists()
    assert list(tmp_path.iterdir()) == []


def test_resolve_rejects_traversal(tmp_path):
    store = ImageStore(tmp_path)
    assert store.resolve("/uploads/a.png") == tmp_path / "a.png"
    for bad in ("/uploads/", "/uploads/..", "/uploads/a/b.png", "/static/a.png"):
        with pytest.raises(ValueError):
            store.resolve(bad)
