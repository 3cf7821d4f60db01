"""
Column view-models.

Each view-model presents the projects of one status and applies board
actions to the shared store. After every action it re-filters the whole
store instead of patching its own list, which keeps the three columns a
partition of the store even though nothing coordinates them.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Type, Union

from .errors import (
    DuplicateIdError,
    NotFoundError,
    ProjectBoardError,
    UnsupportedActionError,
    ValidationError,
)
from .events import BehaviorChannel, Channel, MappedChannel, StatusChange, SubscriptionBag, ViewInput
from .schema import Project, ProjectStatus
from .store import ProjectStore, get_shared_store

logger = logging.getLogger(__name__)


class NotReady:
    """Outputs before transform() has been called."""

    def __repr__(self) -> str:
        return "NOT_READY"

    def __bool__(self) -> bool:
        return False


NOT_READY = NotReady()


@dataclass
class ViewOutput:
    """Streams a column exposes to the UI."""
    projects: BehaviorChannel          # List[Project], current on subscribe
    count: MappedChannel               # int, backs the column counter
    errors: Channel                    # ProjectBoardError, user-correctable


@dataclass(frozen=True)
class Ready:
    outputs: ViewOutput


OutputState = Union[NotReady, Ready]


class StatusViewModel:
    """Shared logic for the Todo, Doing and Done columns."""

    status: ProjectStatus = ProjectStatus.TODO
    accepted_actions: FrozenSet[str] = frozenset({"update", "change_status", "delete"})

    def __init__(self, store: Optional[ProjectStore] = None, strict: bool = False):
        self.store = store if store is not None else get_shared_store()
        self.strict = strict
        self.disposables = SubscriptionBag()
        self._outputs: Optional[ViewOutput] = None
        self._ready = False

    @property
    def state(self) -> OutputState:
        if self._ready and self._outputs is not None:
            return Ready(self._outputs)
        return NOT_READY

    @property
    def projects(self) -> List[Project]:
        return self.store.list_by_status(self.status)

    def transform(self, inputs: ViewInput) -> Ready:
        """Bind action streams and return this column's outputs.

        Calling it again drops the previous bindings; the outputs (and
        their subscribers) stay the same.
        """
        unsupported = [name for name in inputs.provided() if name not in self.accepted_actions]
        if unsupported:
            raise UnsupportedActionError(self.status.title, unsupported)

        self.disposables.dispose()
        if self._outputs is None:
            self._outputs = self._make_outputs()

        if inputs.add_action is not None:
            self.disposables.add(inputs.add_action.subscribe(self._on_add))
        if inputs.update_action is not None:
            self.disposables.add(inputs.update_action.subscribe(self._on_update))
        if inputs.change_status_action is not None:
            self.disposables.add(inputs.change_status_action.subscribe(self._on_change_status))
        if inputs.delete_action is not None:
            self.disposables.add(inputs.delete_action.subscribe(self._on_delete))

        self._ready = True
        logger.debug(f"{self.status.title} bound to: {', '.join(inputs.provided()) or 'nothing'}")
        return Ready(self._outputs)

    def refresh(self) -> None:
        """Re-filter the store and emit the column."""
        if self._outputs is not None:
            self._outputs.projects.publish(self.projects)

    def dispose(self) -> None:
        """Release input bindings and detach every output subscriber."""
        self.disposables.dispose()
        if self._outputs is not None:
            self._outputs.projects.clear()
            self._outputs.errors.clear()
        self._ready = False

    def _make_outputs(self) -> ViewOutput:
        name = self.status.value
        projects = BehaviorChannel(
            f"{name}.projects",
            source=lambda: self.projects,
            propagate_errors=self.strict,
        )
        return ViewOutput(
            projects=projects,
            count=projects.map(len),
            errors=Channel(f"{name}.errors", propagate_errors=self.strict),
        )

    # ── Action handlers ──────────────────────────────────────────────────────

    def _on_add(self, project: Project) -> None:
        def insert():
            _require_project(project)
            self.store.insert(project.with_status(self.status))

        self._apply("add", insert)

    def _on_update(self, project: Project) -> None:
        def update():
            _require_project(project)
            self.store.update(project)

        self._apply("update", update)

    def _on_change_status(self, change: StatusChange) -> None:
        def move():
            # Look in the whole store: the project may be moving into this column
            project = self.store.get(change.project_id)
            if project is None:
                raise NotFoundError(change.project_id)
            self.store.update(project.with_status(change.status))

        self._apply("change_status", move)

    def _on_delete(self, project_id: str) -> None:
        self._apply("delete", lambda: self.store.delete(project_id))

    def _apply(self, action: str, mutate: Callable[[], object]) -> None:
        try:
            mutate()
        except NotFoundError as e:
            # Another column already handled this broadcast
            logger.debug(f"{self.status.title} {action} ignored: {e.message}")
        except ValidationError as e:
            logger.warning(f"{self.status.title} {action} rejected: {e.message}")
            self._report(e)
        except DuplicateIdError as e:
            if self.strict:
                raise
            logger.error(f"{self.status.title} {action} invariant violation: {e.message}")
        self.refresh()

    def _report(self, error: ProjectBoardError) -> None:
        if self._outputs is not None:
            self._outputs.errors.publish(error)


def _require_project(payload: object) -> None:
    if not isinstance(payload, Project):
        raise ValidationError(
            f"Expected a Project, got {type(payload).__name__}",
            details=[{"loc": ["payload"], "msg": "not a project", "type": "type_error"}],
        )


class TodoViewModel(StatusViewModel):
    """Todo column. The only one that creates projects."""
    status = ProjectStatus.TODO
    accepted_actions = frozenset({"add", "update", "change_status", "delete"})


class DoingViewModel(StatusViewModel):
    status = ProjectStatus.DOING


class DoneViewModel(StatusViewModel):
    status = ProjectStatus.DONE


VIEW_MODELS: Dict[ProjectStatus, Type[StatusViewModel]] = {
    ProjectStatus.TODO: TodoViewModel,
    ProjectStatus.DOING: DoingViewModel,
    ProjectStatus.DONE: DoneViewModel,
}


def view_model_for(status: ProjectStatus, store: Optional[ProjectStore] = None,
                   strict: bool = False) -> StatusViewModel:
    return VIEW_MODELS[status](store, strict=strict)
