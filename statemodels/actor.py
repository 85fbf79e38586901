"""Actors: event-driven state machines that communicate by sending messages.

An actor produces an initial state in :meth:`Actor.on_start` and then reacts
to incoming messages and timeouts.  Reactions return the next state, or
``None`` when the state is unchanged, and record outgoing commands in an
:class:`Out` collector.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Hashable, Iterable, Iterator, TypeVar, Union

__all__ = [
    "Id",
    "CancelTimer",
    "SetTimer",
    "Send",
    "Command",
    "Out",
    "Actor",
    "ScriptedActor",
    "is_no_op",
    "majority",
    "peer_ids",
]

T = TypeVar("T")


@dataclass(frozen=True, order=True)
class Id:
    """Uniquely identifies an actor; model checked actors use their index."""

    value: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.value, Id):
            object.__setattr__(self, "value", self.value.value)
        if self.value < 0:
            raise ValueError(f"actor id must be non-negative, got {self.value}")

    def __repr__(self) -> str:
        return f"Id({self.value})"

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    @classmethod
    def vec_from(cls, ids: Iterable[Union[int, "Id"]]) -> list["Id"]:
        """Builds a list of ids from an iterable of integers or ids."""
        return [i if isinstance(i, Id) else cls(i) for i in ids]


@dataclass(frozen=True)
class CancelTimer:
    """Cancel the timer if one is set."""


@dataclass(frozen=True)
class SetTimer:
    """Set or reset the timer; ``duration`` is a ``(low, high)`` range."""

    duration: tuple[Any, Any]


@dataclass(frozen=True)
class Send:
    """Send a message to a destination."""

    recipient: Id
    msg: Any


Command = Union[CancelTimer, SetTimer, Send]


@dataclass
class Out:
    """Collects the commands an actor emits while handling an event."""

    commands: list[Command] = field(default_factory=list)

    def set_timer(self, duration: tuple[Any, Any]) -> None:
        """Records the need to set the timer."""
        low, high = duration
        if high < low:
            raise ValueError("timer range must not end before it starts")
        self.commands.append(SetTimer((low, high)))

    def cancel_timer(self) -> None:
        """Records the need to cancel the timer."""
        self.commands.append(CancelTimer())

    def send(self, recipient: Id, msg: Any) -> None:
        """Records the need to send a message."""
        self.commands.append(Send(recipient, msg))

    def broadcast(self, recipients: Iterable[Id], msg: Any) -> None:
        """Records the need to send a message to each recipient."""
        for recipient in recipients:
            self.send(recipient, msg)

    def extend(self, other: "Out") -> None:
        """Moves every command of ``other`` into this collector, emptying ``other``."""
        self.commands.extend(other.commands)
        other.commands.clear()

    def __iter__(self) -> Iterator[Command]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)

    def __getitem__(self, index: int) -> Command:
        return self.commands[index]


class Actor(Generic[T]):
    """Base class for actors.

    ``on_msg`` and ``on_timeout`` return the next state, or ``None`` when the
    state does not change.  By default both ignore the event.
    """

    def on_start(self, id: Id, out: Out) -> T:
        """Returns the initial state, recording any initial commands."""
        raise NotImplementedError(f"{type(self).__name__} must define on_start")

    def on_msg(self, id: Id, state: T, src: Id, msg: Any, out: Out) -> T | None:
        """Handles a message delivered from ``src``; ignored by default."""
        del id, state, src, msg, out
        return None

    def on_timeout(self, id: Id, state: T, out: Out) -> T | None:
        """Handles the expiry of the actor's timer; ignored by default."""
        del id, state, out
        return None


@dataclass(frozen=True)
class ScriptedActor(Actor[int]):
    """Sends a fixed series of ``(destination, message)`` pairs in order,
    waiting for one message delivery between each.

    The state is the number of script entries already sent.
    """

    script: tuple[tuple[Id, Hashable], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "script", tuple((dst, msg) for dst, msg in self.script))

    def on_start(self, id: Id, out: Out) -> int:
        if not self.script:
            return 0
        dst, msg = self.script[0]
        out.send(dst, msg)
        return 1

    def on_msg(self, id: Id, state: int, src: Id, msg: Any, out: Out) -> int | None:
        if state >= len(self.script):
            return None
        dst, next_msg = self.script[state]
        out.send(dst, next_msg)
        return state + 1


def is_no_op(new_state: Any, out: Out) -> bool:
    """True if a handler neither changed the state nor emitted commands."""
    return new_state is None and len(out) == 0


def majority(cluster_size: int) -> int:
    """Number of nodes that constitute a majority of a cluster of the given size."""
    if cluster_size < 0:
        raise ValueError("cluster size must be non-negative")
    return cluster_size // 2 + 1


def peer_ids(self_id: T, other_ids: Iterable[T]) -> Iterator[T]:
    """Yields the ids in ``other_ids`` other than ``self_id``."""
    return (other for other in other_ids if other != self_id)