"""
Event plumbing: channels, subscriptions, and the action router.

The UI emits each action once. The router multicasts it to every subscribed
view-model, because an action only carries an id or a payload, never the
column that currently owns the project.
"""
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Generic, List, Optional, Tuple, TypeVar

from .errors import ValidationError
from .schema import Project, ProjectStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class Subscription:
    """Handle returned by subscribe(). dispose() detaches the callback."""

    def __init__(self, channel: "Channel", token: int):
        self._channel = channel
        self._token = token
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self._channel._unsubscribe(self._token)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.dispose()


class SubscriptionBag:
    """Collects subscriptions so an owner can release them together."""

    def __init__(self):
        self._subscriptions: List[Subscription] = []

    def add(self, subscription: Subscription) -> Subscription:
        self._subscriptions.append(subscription)
        return subscription

    def dispose(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.dispose()

    def __len__(self) -> int:
        return len(self._subscriptions)


class Channel(Generic[T]):
    """Multicast publish/subscribe channel.

    Delivery is synchronous and in subscription order. A subscriber that
    raises is logged and skipped, so one bad callback cannot stop the others;
    with ``propagate_errors`` the exception reaches the publisher instead.
    """

    def __init__(self, name: str = "", propagate_errors: bool = False):
        self.name = name
        self.propagate_errors = propagate_errors
        self._subscribers: Dict[int, Callable[[T], Any]] = {}
        self._next_token = 0
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[T], Any]) -> Subscription:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback
        return Subscription(self, token)

    def publish(self, value: T) -> None:
        with self._lock:
            callbacks = list(self._subscribers.values())
        for callback in callbacks:
            self._deliver(callback, value)

    def map(self, fn: Callable[[T], U]) -> "MappedChannel[U]":
        """Derived view: every subscriber sees fn(value)."""
        return MappedChannel(self, fn)

    def clear(self) -> None:
        """Detach every subscriber."""
        with self._lock:
            self._subscribers.clear()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _deliver(self, callback: Callable[[T], Any], value: T) -> None:
        try:
            callback(value)
        except Exception as e:
            if self.propagate_errors:
                raise
            logger.error(f"Error in {self.name or 'channel'} subscriber: {e}")

    def _unsubscribe(self, token: int) -> None:
        with self._lock:
            self._subscribers.pop(token, None)


class BehaviorChannel(Channel[T]):
    """Channel that hands every new subscriber the current value first.

    With ``source`` the current value is recomputed on each subscribe;
    otherwise it is the last published value.
    """

    def __init__(self, name: str = "", initial: Optional[T] = None,
                 source: Optional[Callable[[], T]] = None,
                 propagate_errors: bool = False):
        super().__init__(name, propagate_errors=propagate_errors)
        self._value = initial
        self._source = source

    @property
    def value(self) -> Optional[T]:
        if self._source is not None:
            return self._source()
        return self._value

    def subscribe(self, callback: Callable[[T], Any]) -> Subscription:
        subscription = super().subscribe(callback)
        try:
            self._deliver(callback, self.value)
        except Exception:
            subscription.dispose()
            raise
        return subscription

    def publish(self, value: T) -> None:
        self._value = value
        super().publish(value)


class MappedChannel(Generic[U]):
    """Lazy projection of another channel. Holds no subscribers of its own."""

    def __init__(self, source: Any, fn: Callable[[Any], U]):
        self.source = source
        self.fn = fn

    def subscribe(self, callback: Callable[[U], Any]) -> Subscription:
        return self.source.subscribe(lambda value: callback(self.fn(value)))

    def map(self, fn: Callable[[U], Any]) -> "MappedChannel":
        return MappedChannel(self, fn)


# ── Actions ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class StatusChange:
    """Payload of a change-status action."""
    project_id: str
    status: ProjectStatus


@dataclass
class ViewInput:
    """Action streams handed to a view-model's transform()."""
    add_action: Optional[Channel] = None
    update_action: Optional[Channel] = None
    change_status_action: Optional[Channel] = None
    delete_action: Optional[Channel] = None

    def provided(self) -> List[str]:
        names = []
        if self.add_action is not None:
            names.append("add")
        if self.update_action is not None:
            names.append("update")
        if self.change_status_action is not None:
            names.append("change_status")
        if self.delete_action is not None:
            names.append("delete")
        return names


class ActionRouter:
    """Single dispatcher for board actions.

    Every action is published once on its channel and reaches every
    view-model subscribed to it. Dispatch is serialized: an action emitted
    from inside a subscriber is queued until the current one has been fully
    delivered, and other threads wait on the dispatcher lock.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self.add_action: Channel[Project] = Channel("add", propagate_errors=strict)
        self.update_action: Channel[Project] = Channel("update", propagate_errors=strict)
        self.change_status_action: Channel[StatusChange] = Channel("change_status", propagate_errors=strict)
        self.delete_action: Channel[str] = Channel("delete", propagate_errors=strict)

        self._lock = threading.RLock()
        self._pending: Deque[Tuple[Channel, Any]] = deque()
        self._draining = False

    # ── UI-facing emitters ───────────────────────────────────────────────────

    def add(self, project: Project) -> None:
        """Create a project. Raises ValidationError for a malformed one."""
        self._validate(project)
        self._dispatch(self.add_action, project.copy())

    def update(self, project: Project) -> None:
        """Edit a project in place. Raises ValidationError for a malformed one."""
        self._validate(project)
        self._dispatch(self.update_action, project.copy())

    def change_status(self, project_id: str, status: ProjectStatus) -> None:
        if not isinstance(status, ProjectStatus):
            raise ValidationError(
                f"Invalid status {status!r}",
                details=[{"loc": ["status"], "msg": f"unknown status {status!r}", "type": "type_error"}],
            )
        self._dispatch(self.change_status_action, StatusChange(project_id, status))

    def delete(self, project_id: str) -> None:
        self._dispatch(self.delete_action, project_id)

    def inputs_for(self, status: ProjectStatus) -> ViewInput:
        """Channel set a column accepts. Only Todo originates new projects."""
        return ViewInput(
            add_action=self.add_action if status == ProjectStatus.TODO else None,
            update_action=self.update_action,
            change_status_action=self.change_status_action,
            delete_action=self.delete_action,
        )

    # ── Dispatch ─────────────────────────────────────────────────────────────

    def _validate(self, project: Project) -> None:
        try:
            project.validate()
        except ValidationError as e:
            logger.warning(f"Rejected action: {e.message}")
            raise

    def _dispatch(self, channel: Channel, value: Any) -> None:
        with self._lock:
            self._pending.append((channel, value))
            if self._draining:
                return
            self._draining = True
            try:
                while self._pending:
                    target, payload = self._pending.popleft()
                    logger.debug(f"Dispatching {target.name}: {payload}")
                    target.publish(payload)
            except Exception:
                self._pending.clear()
                raise
            finally:
                self._draining = False
