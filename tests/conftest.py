import sys
from pathlib import Path
import pytest
from fastapi.testclient import TestClient

# Ensure project root on sys.path so 'posthub' resolves without an install
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from posthub.config import Settings  # noqa: E402
from posthub.database import init_db  # noqa: E402
from posthub.main import create_app  # noqa: E402

ADMIN_PASSWORD = "test-admin-secret"

@pytest.fixture()
def settings(tmp_path) -> Settings:
    """Per-test settings: file-based SQLite and uploads under tmp_path."""
    return Settings(
        database_url=f"sqlite+pysqlite:///{tmp_path / 'posthub_test.db'}",
        admin_password=ADMIN_PASSWORD,
        uploads_dir=tmp_path / "uploads",
        public_dir=tmp_path / "public",
    )

@pytest.fixture()
def make_app():
    """Build apps for arbitrary settings; engines are disposed after the test."""
    built = []
    def _make(settings: Settings):
        application = create_app(settings)
        init_db(application.state.engine)
        built.append(application)
        return application
    yield _make
    for application in built:
        application.state.engine.dispose()

@pytest.fixture()
def app(make_app, settings):
    return make_app(settings)

@pytest.fixture()
def client(app):
    return TestClient(app)

@pytest.fixture()
def db_session(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()

# ---------- Request helpers ----------

def post_form(title="A", content="B", password=ADMIN_PASSWORD, **extra):
    form = {"title": title, "content": content, **extra}
    if password is not None:
        form["adminPassword"] = password
    return {k: v for k, v in form.items() if v is not None}

def image_files(*names: str):
    return [("images", (name, f"bytes-of-{name}".encode(), "image/png")) for name in names]

@pytest.fixture()
def create_post(client):
    """Create a post through the API and return its JSON."""
    def _create(title="A", content="B", images=(), **extra):
        files = image_files(*images) if images else None
        r = client.post("/api/posts", data=post_form(title=title, content=content, **extra), files=files)
        assert r.status_code == 200, r.text
        return r.json()["post"]
    return _create
