"""Single Decree Paxos: a cluster of servers that never disagrees on a value.

A ``Put`` starts a new leadership term (ballot).  In phase 1 the leader
closes earlier terms with ``Prepare`` and learns the most recently accepted
proposal from a quorum.  In phase 2 it asks the servers to ``Accept`` that
proposal, or the client's own proposal if none was accepted before.  Once a
quorum accepts, the value is decided.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Hashable, Optional

from .actor import Actor, Id, Out, majority
from .register import Get, GetOk, Internal, Put, PutOk

__all__ = [
    "Ballot",
    "Proposal",
    "Prepare",
    "Prepared",
    "Accept",
    "Accepted",
    "Decided",
    "PaxosState",
    "PaxosActor",
]

Ballot = tuple[int, Id]
"""A round number paired with the id of the leader of that round."""

Proposal = tuple[int, Id, Hashable]
"""A request id, the id of the requesting client and the proposed value."""

AcceptedProposal = tuple[Ballot, Proposal]


@dataclass(frozen=True)
class Prepare:
    ballot: Ballot


@dataclass(frozen=True)
class Prepared:
    ballot: Ballot
    last_accepted: Optional[AcceptedProposal]


@dataclass(frozen=True)
class Accept:
    ballot: Ballot
    proposal: Proposal


@dataclass(frozen=True)
class Accepted:
    ballot: Ballot


@dataclass(frozen=True)
class Decided:
    ballot: Ballot
    proposal: Proposal


@dataclass(frozen=True)
class PaxosState:
    """State shared by the leader and acceptor roles of a server.

    ``prepares`` holds ``(server, last_accepted)`` pairs sorted by server.
    """

    ballot: Ballot = (0, Id(0))
    proposal: Optional[Proposal] = None
    prepares: tuple[tuple[Id, Optional[AcceptedProposal]], ...] = ()
    accepts: frozenset[Id] = frozenset()
    accepted: Optional[AcceptedProposal] = None
    is_decided: bool = False


def _with_prepare(prepares, src: Id, last_accepted) -> tuple:
    merged = dict(prepares)
    merged[src] = last_accepted
    return tuple(sorted(merged.items(), key=lambda item: item[0]))


@dataclass(frozen=True)
class PaxosActor(Actor[PaxosState]):
    """A Paxos server, knowing the ids of its peers."""

    peer_ids: tuple[Id, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "peer_ids", tuple(self.peer_ids))

    @property
    def _quorum(self) -> int:
        return majority(len(self.peer_ids) + 1)

    def on_start(self, id: Id, out: Out) -> PaxosState:
        return PaxosState()

    def on_msg(self, id: Id, state: PaxosState, src: Id, msg: Any, out: Out) -> PaxosState | None:
        if state.is_decided:
            if isinstance(msg, Get):
                # An undecided server stays silent instead: a decision made
                # elsewhere may still be in flight.
                if state.accepted is None:
                    raise ValueError("decided but lacks accepted state")
                _ballot, (_request_id, _requester, value) = state.accepted
                out.send(src, GetOk(msg.request_id, value))
            return None

        if isinstance(msg, Put):
            if state.proposal is not None:
                return None
            ballot = (state.ballot[0] + 1, id)
            out.broadcast(self.peer_ids, Internal(Prepare(ballot)))
            return replace(
                state,
                proposal=(msg.request_id, src, msg.value),
                ballot=ballot,
                prepares=((id, state.accepted),),
                accepts=frozenset(),
            )
        if not isinstance(msg, Internal):
            return None

        inner = msg.msg
        if isinstance(inner, Prepare):
            if not state.ballot < inner.ballot:
                return None
            out.send(src, Internal(Prepared(inner.ballot, state.accepted)))
            return replace(state, ballot=inner.ballot)
        if isinstance(inner, Prepared):
            if inner.ballot != state.ballot:
                return None
            return self._on_prepared(id, state, src, inner, out)
        if isinstance(inner, Accept):
            if not state.ballot <= inner.ballot:
                return None
            out.send(src, Internal(Accepted(inner.ballot)))
            return replace(state, ballot=inner.ballot, accepted=(inner.ballot, inner.proposal))
        if isinstance(inner, Accepted):
            if inner.ballot != state.ballot:
                return None
            return self._on_accepted(state, src, inner, out)
        if isinstance(inner, Decided):
            return replace(
                state,
                ballot=inner.ballot,
                accepted=(inner.ballot, inner.proposal),
                is_decided=True,
            )
        return None

    def _on_prepared(self, id: Id, state: PaxosState, src: Id, msg: Prepared, out: Out):
        prepares = _with_prepare(state.prepares, src, msg.last_accepted)
        if len(prepares) != self._quorum:
            return replace(state, prepares=prepares)

        # Drive the proposal accepted in the most recent term, if any, so that
        # an earlier decision is never contradicted.
        accepted = [last for _, last in prepares if last is not None]
        if accepted:
            _, proposal = max(accepted)
        elif state.proposal is not None:
            proposal = state.proposal
        else:
            raise ValueError("proposal expected")

        out.broadcast(self.peer_ids, Internal(Accept(msg.ballot, proposal)))
        return replace(
            state,
            prepares=prepares,
            proposal=proposal,
            accepted=(msg.ballot, proposal),
            accepts=state.accepts | {id},
        )

    def _on_accepted(self, state: PaxosState, src: Id, msg: Accepted, out: Out):
        accepts = state.accepts | {src}
        if len(accepts) != self._quorum:
            return replace(state, accepts=accepts)
        if state.proposal is None:
            raise ValueError("proposal expected")
        proposal = state.proposal
        out.broadcast(self.peer_ids, Internal(Decided(msg.ballot, proposal)))
        request_id, requester_id, _ = proposal
        out.send(requester_id, PutOk(request_id))
        return replace(state, accepts=accepts, is_decided=True)