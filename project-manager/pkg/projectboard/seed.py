"""Demo projects for a fresh board."""
from datetime import datetime, timedelta, timezone
from typing import List

from .schema import Project, ProjectStatus


def demo_projects() -> List[Project]:
    now = datetime.now(timezone.utc)
    return [
        Project(
            title="Write project proposal",
            description="Scope, milestones and owners",
            due_date=now + timedelta(days=3),
            status=ProjectStatus.TODO,
        ),
        Project(
            title="Set up CI",
            description="Run the test suite on every push",
            due_date=now + timedelta(days=7),
            status=ProjectStatus.TODO,
        ),
        Project(
            title="Board layout",
            description="Three columns with per-column counters",
            due_date=now + timedelta(days=1),
            status=ProjectStatus.DOING,
        ),
        Project(
            title="Kickoff meeting",
            due_date=now - timedelta(days=2),
            status=ProjectStatus.DONE,
        ),
    ]
