"""
Shared fixtures: a throwaway public directory and users file per test, and
a TestClient running the full app lifespan against them.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app

# Keep hashing cheap in tests
TEST_ITERATIONS = 1_000


class FakeClock:
    """Callable clock for SessionRegistry that only moves when told to."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def public_dir(tmp_path):
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_text("<h1>home</h1>")
    (root / "Login.html").write_text("<h1>login</h1>")
    (root / "mainmenu.html").write_text("<h1>main menu</h1>")
    (root / "style.css").write_text("body {}")
    (root / "script.js").write_text("// js")
    (root / "data.bin").write_bytes(b"\x00\x01")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_text("<h1>docs</h1>")
    (tmp_path / "secret.txt").write_text("outside the root")
    return root


@pytest.fixture
def settings(tmp_path, public_dir):
    return Settings(
        public_dir=str(public_dir),
        users_file=str(tmp_path / "users.txt"),
        session_ttl_seconds=3600,
        password_hash_iterations=TEST_ITERATIONS,
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c
