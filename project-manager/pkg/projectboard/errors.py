"""
Error hierarchy for the project board.

Store operations raise these; view-models decide which ones are no-ops,
which ones go to the UI, and which ones are invariant violations.
"""
from typing import Any, Dict, List, Optional


class ProjectBoardError(Exception):
    """Base exception for all project board errors."""

    def __init__(self, message: str, error_code: str = "internal_error"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class NotFoundError(ProjectBoardError):
    """Action references a project id that is not in the store."""

    def __init__(self, project_id: str):
        super().__init__(
            message=f"Project with ID {project_id} not found",
            error_code="not_found",
        )
        self.project_id = project_id


class DuplicateIdError(ProjectBoardError):
    """A project with the same id is already stored."""

    def __init__(self, project_id: str):
        super().__init__(
            message=f"Project with ID {project_id} already exists",
            error_code="duplicate_id",
        )
        self.project_id = project_id


class ValidationError(ProjectBoardError):
    """Malformed project. User-correctable, never a crash."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message=message, error_code="validation_error")
        self.details = details or []


class UnsupportedActionError(ProjectBoardError):
    """A view-model was handed an action stream it does not accept."""

    def __init__(self, column: str, actions: List[str]):
        super().__init__(
            message=f"{column} column does not accept: {', '.join(sorted(actions))}",
            error_code="unsupported_action",
        )
        self.column = column
        self.actions = actions
