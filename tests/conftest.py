import os

import pytest
from fastapi.testclient import TestClient

# The app module builds a default app at import; keep it off the working directory.
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from task_tracker.context import StoreContext, build_context  # noqa: E402
from task_tracker.identity import IdentityStore  # noqa: E402
from task_tracker.main import create_app  # noqa: E402
from task_tracker.settings import Settings  # noqa: E402
from task_tracker.task_store import TaskStore  # noqa: E402


@pytest.fixture
def settings(tmp_path) -> Settings:
    data_dir = tmp_path / "data"
    return Settings(
        persistence_backend="file",
        data_dir=str(data_dir),
        users_file=str(data_dir / "users.json"),
        tasks_file=str(data_dir / "tasks.json"),
        sqlite_db_path=str(data_dir / "tracker.db"),
    )


@pytest.fixture
def context(settings) -> StoreContext:
    return build_context(settings)


@pytest.fixture
def identity(context) -> IdentityStore:
    return IdentityStore(context)


@pytest.fixture
def tasks(context) -> TaskStore:
    return TaskStore(context)


@pytest.fixture
def user_id(identity) -> str:
    result = identity.create_user("alice", "alice@example.com", "secret1")
    assert result.success
    return result.value


@pytest.fixture
def client(settings) -> TestClient:
    return TestClient(create_app(settings))
