import json
import pytest

from posthub.legacy_import import import_records, legacy_record_to_post, load_legacy_file, main
from posthub.models.db import Post
from posthub.services.normalizer import to_api

LEGACY_POSTS = [
    {
        "id": 1718000000000,
        "title": "Newer",
        "category": "Gear",
        "content": "Two images",
        "images": ["/uploads/images-1-1.png", "/uploads/images-1-2.png"],
        "imageUrl": "/uploads/images-1-1.png",
        "affiliateLink": "https://shop.example/a",
        "date": "2024-06-10T08:00:00.000Z",
        "updatedAt": "2024-06-11T09:30:00.000Z",
    },
    {
        "id": 1700000000000,
        "title": "Older",
        "content": "Single image era",
        "imageUrl": "/uploads/images-0-1.png",
        "date": "2023-11-14T22:13:20.000Z",
    },
    {"id": 5, "title": "", "content": "no title"},
    "garbage",
]


def test_legacy_record_with_single_image():
    post = legacy_record_to_post(LEGACY_POSTS[1])
    assert json.loads(post.images) == ["/uploads/images-0-1.png"]
    assert post.image_url == "/uploads/images-0-1.png"
    assert post.category == ""
    assert post.updated_at is None


def test_legacy_record_requires_title():
    with pytest.raises(ValueError):
        legacy_record_to_post(LEGACY_POSTS[2])


def test_import_records_inserts_oldest_first(db_session):
    report = import_records(db_session, LEGACY_POSTS)
    assert report.imported == 2
    assert report.skipped == 2
    rows = db_session.query(Post).order_by(Post.id).all()
    assert [r.title for r in rows] == ["Older", "Newer"]

    newer = to_api(rows[1])
    assert newer.images == ["/uploads/images-1-1.png", "/uploads/images-1-2.png"]
    assert newer.image_url == newer.images[0]
    assert newer.created_at == "2024-06-10T08:00:00Z"
    assert newer.updated_at == "2024-06-11T09:30:00Z"


def test_dry_run_writes_nothing(db_session):
    report = import_records(db_session, LEGACY_POSTS, dry_run=True)
    assert report.imported == 2
    assert db_session.query(Post).count() == 0


def test_load_legacy_file_variants(tmp_path):
    path = tmp_path / "posts.json"
    path.write_text("")
    assert load_legacy_file(path) == []
    path.write_text(json.dumps({"posts": LEGACY_POSTS[:1]}))
    assert len(load_legacy_file(path)) == 1
    path.write_text('"nope"')
    with pytest.raises(ValueError):
        load_legacy_file(path)


def test_main_imports_into_configured_database(tmp_path, monkeypatch, capsys):
    from posthub import config

    monkeypatch.setattr("posthub.legacy_import.setup_logging", lambda **kwargs: None)

    db_file = tmp_path / "cli.db"
    source = tmp_path / "posts.json"
    source.write_text(json.dumps(LEGACY_POSTS))
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_file}")
    config.get_settings.cache_clear()
    try:
        assert main([str(source)]) == 0
    finally:
        config.get_settings.cache_clear()
    assert "Imported 2 posts, skipped 2" in capsys.readouterr().out
    assert db_file.exists()


def test_main_reports_unreadable_file(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr("posthub.legacy_import.setup_logging", lambda **kwargs: None)
    assert main([str(tmp_path / "missing.json")]) == 1
    assert "Cannot read" in capsys.readouterr().err
