"""
Board facade: one store, one action router, three column view-models.

This is everything the board screen needs apart from drawing. The screen
calls connect() once, binds the three outputs to its lists and counters,
forwards user actions to board.router, and calls close() when it goes away.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .config import BoardConfig
from .events import ActionRouter
from .schema import ProjectStatus
from .store import ProjectStore, build_store, get_shared_store
from .viewmodel import StatusViewModel, ViewOutput, view_model_for

logger = logging.getLogger(__name__)


@dataclass
class BoardOutputs:
    todo: ViewOutput
    doing: ViewOutput
    done: ViewOutput

    def for_status(self, status: ProjectStatus) -> ViewOutput:
        return {
            ProjectStatus.TODO: self.todo,
            ProjectStatus.DOING: self.doing,
            ProjectStatus.DONE: self.done,
        }[status]


class ProjectBoard:
    """Wires the store, router and view-models together."""

    def __init__(self, store: Optional[ProjectStore] = None, config: Optional[BoardConfig] = None):
        self.config = config or BoardConfig()
        self.store = store if store is not None else ProjectStore()
        self.router = ActionRouter(strict=self.config.strict)
        self.view_models: Dict[ProjectStatus, StatusViewModel] = {
            status: view_model_for(status, self.store, strict=self.config.strict)
            for status in ProjectStatus
        }
        self.outputs: Optional[BoardOutputs] = None

    @classmethod
    def from_config(cls, config: Optional[BoardConfig] = None) -> "ProjectBoard":
        config = config or BoardConfig.load()
        if config.use_shared_store:
            store = get_shared_store(config)
        else:
            store = build_store(config)
        return cls(store=store, config=config)

    @property
    def todo(self) -> StatusViewModel:
        return self.view_models[ProjectStatus.TODO]

    @property
    def doing(self) -> StatusViewModel:
        return self.view_models[ProjectStatus.DOING]

    @property
    def done(self) -> StatusViewModel:
        return self.view_models[ProjectStatus.DONE]

    def connect(self) -> BoardOutputs:
        """Transform every column against the router's channels."""
        ready = {
            status: vm.transform(self.router.inputs_for(status))
            for status, vm in self.view_models.items()
        }
        self.outputs = BoardOutputs(
            todo=ready[ProjectStatus.TODO].outputs,
            doing=ready[ProjectStatus.DOING].outputs,
            done=ready[ProjectStatus.DONE].outputs,
        )
        logger.info(f"Board connected ({len(self.store)} projects)")
        return self.outputs

    def close(self) -> None:
        for vm in self.view_models.values():
            vm.dispose()
        self.outputs = None
        logger.info("Board closed")

    def __enter__(self) -> "ProjectBoard":
        self.connect()
        return self

    def __exit__(self, *exc) -> None:
        self.close()
