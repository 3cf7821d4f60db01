"""
Project schema and status columns.

Board layout:
  Todo → Doing → Done

Any column can move a project to any other column; the status field is the
only thing that decides which column shows it.
"""
from enum import Enum
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Any
import uuid

from .errors import ValidationError


class ProjectStatus(Enum):
    """Board columns. Every project is in exactly one."""
    TODO = "todo"
    DOING = "doing"
    DONE = "done"

    @classmethod
    def from_str(cls, value: str) -> "ProjectStatus":
        try:
            return cls[value.upper()]
        except KeyError:
            return cls.TODO

    @property
    def title(self) -> str:
        return self.name


def new_project_id() -> str:
    """Fresh, never-reused project id."""
    return str(uuid.uuid4())


@dataclass
class Project:
    """One card on the board."""

    title: str
    description: str = ""
    due_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: ProjectStatus = ProjectStatus.TODO
    id: str = field(default_factory=new_project_id)

    def validate(self) -> None:
        """Raise ValidationError if this project must not reach the store."""
        details = []
        if not self.id:
            details.append({"loc": ["id"], "msg": "id is required", "type": "missing"})
        if not isinstance(self.title, str) or not self.title.strip():
            details.append({"loc": ["title"], "msg": "title must not be empty", "type": "empty"})
        if self.description is not None and not isinstance(self.description, str):
            details.append({"loc": ["description"], "msg": "description must be text", "type": "type_error"})
        if not isinstance(self.due_date, datetime):
            details.append({"loc": ["due_date"], "msg": "due_date must be a datetime", "type": "type_error"})
        if not isinstance(self.status, ProjectStatus):
            details.append({"loc": ["status"], "msg": f"unknown status {self.status!r}", "type": "type_error"})

        if details:
            fields = ", ".join(d["loc"][0] for d in details)
            raise ValidationError(f"Invalid project {self.id or '<no id>'}: {fields}", details=details)

    def with_status(self, status: ProjectStatus) -> "Project":
        return replace(self, status=status)

    def copy(self) -> "Project":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description or "",
            "due_date": self.due_date.isoformat() if isinstance(self.due_date, datetime) else self.due_date,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        """Deserialize from dict."""
        due_date = data.get("due_date")
        if isinstance(due_date, str):
            due_date = datetime.fromisoformat(due_date)
        elif due_date is None:
            due_date = datetime.now(timezone.utc)

        status = data.get("status", ProjectStatus.TODO.value)
        if not isinstance(status, ProjectStatus):
            try:
                status = ProjectStatus(status)
            except ValueError:
                status = ProjectStatus.from_str(str(status))

        return cls(
            id=data.get("id") or new_project_id(),
            title=data.get("title", ""),
            description=data.get("description") or "",
            due_date=due_date,
            status=status,
        )

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Project(id={self.id}, title={self.title}, status={self.status.value})"
