"""Shared test fixtures for the project board tests."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure the pkg package is importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from pkg.projectboard.board import ProjectBoard  # noqa: E402
from pkg.projectboard.schema import Project, ProjectStatus  # noqa: E402
from pkg.projectboard.store import ProjectStore, reset_shared_store  # noqa: E402

DUE = datetime(2022, 9, 30, tzinfo=timezone.utc)


class Recorder:
    """Collects the id lists a projects stream emits."""

    def __init__(self, stream):
        self.emissions = []
        self.subscription = stream.subscribe(self)

    def __call__(self, projects):
        self.emissions.append([p.id for p in projects])

    @property
    def last(self):
        return self.emissions[-1]


@pytest.fixture(autouse=True)
def _isolate(monkeypatch):
    for name in ("PROJECTBOARD_DB", "PROJECTBOARD_STRICT", "PROJECTBOARD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_shared_store()
    yield
    reset_shared_store()


@pytest.fixture
def make_project():
    def _make(id, title=None, status=ProjectStatus.TODO, description=""):
        return Project(
            id=id,
            title=title if title is not None else f"Project {id}",
            description=description,
            due_date=DUE,
            status=status,
        )
    return _make


@pytest.fixture
def store(make_project):
    return ProjectStore([make_project("1")])


@pytest.fixture
def board(store):
    b = ProjectBoard(store=store)
    b.connect()
    yield b
    b.close()
