from __future__ import annotations

from pathlib import Path
import sys
from typing import Any, Callable


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

JWT_SECRET = "test-secret"


@pytest.fixture
def sandbox_project(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Run every test from an empty temp directory so nothing touches a real jsondeck.yml / database.
    """
    monkeypatch.chdir(tmp_path)
    for name in ("JSONDECK_CONFIG", "DEBUG_LOG_REQUESTS", "DEBUG_LOG_TOKENS", "JWT_ALG", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def make_config() -> Callable[..., Any]:
    from settings import AppConfig, ResourceConfig

    def _make(resources: tuple[str, ...] = ("posts", "comments"), **overrides: Any) -> AppConfig:
        return AppConfig(resources=tuple(ResourceConfig(name=n) for n in resources), **overrides)

    return _make


@pytest.fixture
def auth_config(make_config):
    return make_config(
        requires_authorization=True,
        jwt_secret=JWT_SECRET,
        jwt_expiration_time=300,
        admin_username="admin",
        admin_password="password",
    )


@pytest.fixture
def make_client(sandbox_project: Path):
    from fastapi.testclient import TestClient

    import app as app_module

    def _make(config, base_dir: Path | None = None) -> TestClient:
        return TestClient(app_module.create_app(config, base_dir=base_dir or sandbox_project))

    return _make


@pytest.fixture
def db_path(sandbox_project: Path) -> Path:
    return sandbox_project / "database.json"
