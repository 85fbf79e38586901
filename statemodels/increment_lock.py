"""Threads that increment a shared counter while holding a lock.

Each thread acquires the lock (pc 0), reads the shared value (pc 1), writes
back its local copy plus one (pc 2) and releases the lock (pc 3), ending at
pc 4.  The lock keeps the "fin" and "mutex" properties true.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from .properties import Property

__all__ = ["ActionKind", "Action", "ProcState", "LockState"]


class ActionKind(enum.Enum):
    LOCK = "lock"
    READ = "read"
    WRITE = "write"
    RELEASE = "release"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    thread: int


@dataclass(frozen=True, order=True)
class ProcState:
    """A thread's local copy ``t`` and its program counter ``pc``."""

    t: int = 0
    pc: int = 0


def _replace_at(items: tuple, index: int, value) -> tuple:
    return items[:index] + (value,) + items[index + 1:]


@dataclass(frozen=True)
class LockState:
    """Shared value ``i``, the lock flag and each thread's state; also the model."""

    i: int = 0
    lock: bool = False
    s: tuple[ProcState, ...] = ()

    @classmethod
    def new(cls, n: int) -> "LockState":
        """The initial state for ``n`` threads."""
        return cls(i=0, lock=False, s=tuple(ProcState(t=0, pc=0) for _ in range(n)))

    def representative(self) -> "LockState":
        """The state with threads sorted, for symmetry reduction."""
        return LockState(i=self.i, lock=self.lock, s=tuple(sorted(self.s)))

    def init_states(self) -> list["LockState"]:
        return [self]

    def actions(self, state: "LockState") -> list[Action]:
        actions = []
        for thread_id, proc in enumerate(state.s):
            if proc.pc == 0 and not state.lock:
                actions.append(Action(ActionKind.LOCK, thread_id))
            elif proc.pc == 1:
                actions.append(Action(ActionKind.READ, thread_id))
            elif proc.pc == 2:
                actions.append(Action(ActionKind.WRITE, thread_id))
            elif proc.pc == 3 and state.lock:
                actions.append(Action(ActionKind.RELEASE, thread_id))
        return actions

    def next_state(self, last_state: "LockState", action: Action) -> "LockState":
        n = action.thread
        proc = last_state.s[n]
        if action.kind is ActionKind.LOCK:
            return replace(last_state, lock=True, s=_replace_at(last_state.s, n, replace(proc, pc=1)))
        if action.kind is ActionKind.READ:
            return replace(
                last_state, s=_replace_at(last_state.s, n, ProcState(t=last_state.i, pc=2))
            )
        if action.kind is ActionKind.WRITE:
            return replace(
                last_state, i=proc.t + 1, s=_replace_at(last_state.s, n, replace(proc, pc=3))
            )
        if action.kind is ActionKind.RELEASE:
            return replace(last_state, lock=False, s=_replace_at(last_state.s, n, replace(proc, pc=4)))
        raise ValueError(f"unknown action {action!r}")

    def properties(self) -> list[Property]:
        return [
            Property.always(
                "fin",
                lambda _, state: sum(1 for p in state.s if p.pc >= 3) == state.i,
            ),
            Property.always(
                "mutex",
                lambda _, state: sum(1 for p in state.s if 1 <= p.pc < 4) <= 1,
            ),
        ]