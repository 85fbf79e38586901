"""Two phase commit between a transaction manager and resource managers.

A subset of the commit protocol from "Consensus on Transaction Commit":
resource managers (RMs) prepare or abort on their own, the transaction
manager (TM) gathers ``Prepared`` messages and then broadcasts a commit or
an abort decision.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from .properties import Property

__all__ = [
    "RmState",
    "TmState",
    "MessageKind",
    "Message",
    "ActionKind",
    "Action",
    "TwoPhaseState",
    "TwoPhaseSys",
]


class RmState(enum.IntEnum):
    """State of a resource manager, ordered as the protocol progresses."""

    WORKING = 0
    PREPARED = 1
    COMMITTED = 2
    ABORTED = 3


class TmState(enum.Enum):
    """State of the transaction manager."""

    INIT = "init"
    COMMITTED = "committed"
    ABORTED = "aborted"


class MessageKind(enum.IntEnum):
    PREPARED = 0
    COMMIT = 1
    ABORT = 2


@dataclass(frozen=True, order=True)
class Message:
    """A message in flight; ``rm`` is set only for ``PREPARED`` messages."""

    kind: MessageKind
    rm: int | None = None


_COMMIT = Message(MessageKind.COMMIT)
_ABORT = Message(MessageKind.ABORT)


class ActionKind(enum.Enum):
    TM_RCV_PREPARED = "tm_rcv_prepared"
    TM_COMMIT = "tm_commit"
    TM_ABORT = "tm_abort"
    RM_PREPARE = "rm_prepare"
    RM_CHOOSE_TO_ABORT = "rm_choose_to_abort"
    RM_RCV_COMMIT_MSG = "rm_rcv_commit_msg"
    RM_RCV_ABORT_MSG = "rm_rcv_abort_msg"


@dataclass(frozen=True)
class Action:
    """A protocol step; ``rm`` names the resource manager involved, if any."""

    kind: ActionKind
    rm: int | None = None


@dataclass(frozen=True)
class TwoPhaseState:
    """Global state: per-RM states, the TM state and the messages sent."""

    rm_state: tuple[RmState, ...]
    tm_state: TmState
    tm_prepared: tuple[bool, ...]
    msgs: frozenset[Message]

    def representative(self) -> "TwoPhaseState":
        """Renumbers the RMs so their states are sorted, for symmetry reduction."""
        order = sorted(range(len(self.rm_state)), key=self.rm_state.__getitem__)
        new_index = {old: new for new, old in enumerate(order)}
        return TwoPhaseState(
            rm_state=tuple(self.rm_state[old] for old in order),
            tm_state=self.tm_state,
            tm_prepared=tuple(self.tm_prepared[old] for old in order),
            msgs=frozenset(
                msg if msg.rm is None else Message(msg.kind, new_index[msg.rm])
                for msg in self.msgs
            ),
        )


def _with_rm(values: tuple, rm: int, value) -> tuple:
    if not 0 <= rm < len(values):
        raise IndexError(f"no resource manager {rm}")
    return values[:rm] + (value,) + values[rm + 1:]


@dataclass(frozen=True)
class TwoPhaseSys:
    """The two phase commit model over the resource managers in ``rms``."""

    rms: range

    def init_states(self) -> list[TwoPhaseState]:
        return [
            TwoPhaseState(
                rm_state=tuple(RmState.WORKING for _ in self.rms),
                tm_state=TmState.INIT,
                tm_prepared=tuple(False for _ in self.rms),
                msgs=frozenset(),
            )
        ]

    def actions(self, state: TwoPhaseState) -> list[Action]:
        actions = []
        tm_init = state.tm_state is TmState.INIT
        if tm_init and all(state.tm_prepared):
            actions.append(Action(ActionKind.TM_COMMIT))
        if tm_init:
            actions.append(Action(ActionKind.TM_ABORT))
        for rm in self.rms:
            if tm_init and Message(MessageKind.PREPARED, rm) in state.msgs:
                actions.append(Action(ActionKind.TM_RCV_PREPARED, rm))
            working = rm < len(state.rm_state) and state.rm_state[rm] is RmState.WORKING
            if working:
                actions.append(Action(ActionKind.RM_PREPARE, rm))
                actions.append(Action(ActionKind.RM_CHOOSE_TO_ABORT, rm))
            if _COMMIT in state.msgs:
                actions.append(Action(ActionKind.RM_RCV_COMMIT_MSG, rm))
            if _ABORT in state.msgs:
                actions.append(Action(ActionKind.RM_RCV_ABORT_MSG, rm))
        return actions

    def next_state(self, last_state: TwoPhaseState, action: Action) -> TwoPhaseState:
        kind, rm = action.kind, action.rm
        if kind is ActionKind.TM_RCV_PREPARED:
            return replace(last_state, tm_prepared=_with_rm(last_state.tm_prepared, rm, True))
        if kind is ActionKind.TM_COMMIT:
            return replace(last_state, tm_state=TmState.COMMITTED, msgs=last_state.msgs | {_COMMIT})
        if kind is ActionKind.TM_ABORT:
            return replace(last_state, tm_state=TmState.ABORTED, msgs=last_state.msgs | {_ABORT})
        if kind is ActionKind.RM_PREPARE:
            return replace(
                last_state,
                rm_state=_with_rm(last_state.rm_state, rm, RmState.PREPARED),
                msgs=last_state.msgs | {Message(MessageKind.PREPARED, rm)},
            )
        if kind is ActionKind.RM_RCV_COMMIT_MSG:
            return replace(last_state, rm_state=_with_rm(last_state.rm_state, rm, RmState.COMMITTED))
        if kind in (ActionKind.RM_CHOOSE_TO_ABORT, ActionKind.RM_RCV_ABORT_MSG):
            return replace(last_state, rm_state=_with_rm(last_state.rm_state, rm, RmState.ABORTED))
        raise ValueError(f"unknown action {action!r}")

    def properties(self) -> list[Property]:
        return [
            Property.sometimes(
                "abort agreement",
                lambda _, state: all(s is RmState.ABORTED for s in state.rm_state),
            ),
            Property.sometimes(
                "commit agreement",
                lambda _, state: all(s is RmState.COMMITTED for s in state.rm_state),
            ),
            Property.always(
                "consistent",
                lambda _, state: not (
                    RmState.ABORTED in state.rm_state and RmState.COMMITTED in state.rm_state
                ),
            ),
        ]