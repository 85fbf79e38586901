"""Threads that increment a shared counter without synchronisation.

Each thread atomically reads the shared value (program counter 1) and then
atomically writes back its local copy plus one (program counter 2), ending at
program counter 3.  Interleaving loses updates, which violates the "fin"
property.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from .properties import Property

__all__ = ["ActionKind", "Action", "ProcState", "IncrementState"]


class ActionKind(enum.Enum):
    READ = "read"
    """A thread reads the shared value into its local state."""
    WRITE = "write"
    """A thread writes its local value plus one to the shared state."""


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    thread: int


@dataclass(frozen=True, order=True)
class ProcState:
    """A thread's local value ``t`` and program counter ``pc``."""

    t: int = 0
    pc: int = 0


def _replace_at(items: tuple, index: int, value) -> tuple:
    return items[:index] + (value,) + items[index + 1:]


@dataclass(frozen=True)
class IncrementState:
    """The shared value ``i`` and each thread's state; also serves as the model."""

    i: int = 0
    s: tuple[ProcState, ...] = ()

    @classmethod
    def new(cls, n: int) -> "IncrementState":
        """The initial state for ``n`` threads."""
        return cls(i=0, s=tuple(ProcState(t=0, pc=1) for _ in range(n)))

    def representative(self) -> "IncrementState":
        """The state with threads sorted, for symmetry reduction."""
        return IncrementState(i=self.i, s=tuple(sorted(self.s)))

    def init_states(self) -> list["IncrementState"]:
        return [self]

    def actions(self, state: "IncrementState") -> list[Action]:
        actions = []
        for thread_id, proc in enumerate(state.s):
            if proc.pc == 1:
                actions.append(Action(ActionKind.READ, thread_id))
            elif proc.pc == 2:
                actions.append(Action(ActionKind.WRITE, thread_id))
        return actions

    def next_state(self, last_state: "IncrementState", action: Action) -> "IncrementState":
        n = action.thread
        if action.kind is ActionKind.READ:
            return replace(last_state, s=_replace_at(last_state.s, n, ProcState(t=last_state.i, pc=2)))
        if action.kind is ActionKind.WRITE:
            proc = last_state.s[n]
            return IncrementState(
                i=proc.t + 1,
                s=_replace_at(last_state.s, n, replace(proc, pc=3)),
            )
        raise ValueError(f"unknown action {action!r}")

    def properties(self) -> list[Property]:
        return [
            Property.always(
                "fin",
                lambda _, state: sum(1 for p in state.s if p.pc == 3) == state.i,
            )
        ]