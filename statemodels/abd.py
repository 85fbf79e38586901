"""A linearizable register replicated over servers, answering while a quorum lives.

Follows the algorithm of Attiya, Bar-Noy and Dolev ("ABD"): a request first
queries a quorum for the latest sequenced value (phase 1), then records the
chosen value at a quorum (phase 2) before answering the client.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Hashable, Iterable, Optional

from .actor import Actor, Id, Out, majority
from .register import DEFAULT_VALUE, Get, GetOk, Internal, Put, PutOk

__all__ = [
    "Seq",
    "Query",
    "AckQuery",
    "Record",
    "AckRecord",
    "Phase1",
    "Phase2",
    "AbdState",
    "AbdActor",
]

Seq = tuple[int, Id]
"""A logical clock paired with the id of the server that wrote the value."""


@dataclass(frozen=True)
class Query:
    request_id: int


@dataclass(frozen=True)
class AckQuery:
    request_id: int
    seq: Seq
    value: Hashable


@dataclass(frozen=True)
class Record:
    request_id: int
    seq: Seq
    value: Hashable


@dataclass(frozen=True)
class AckRecord:
    request_id: int


@dataclass(frozen=True)
class Phase1:
    """Gathering the sequenced values of a quorum.

    ``write`` is the value to write, or ``None`` for a read.  ``responses``
    holds ``(server, (seq, value))`` pairs sorted by server.
    """

    request_id: int
    requester_id: Id
    write: Optional[Hashable]
    responses: tuple[tuple[Id, tuple[Seq, Hashable]], ...]


@dataclass(frozen=True)
class Phase2:
    """Recording the chosen value at a quorum.

    ``read`` is the value to return to a reader, or ``None`` for a write.
    """

    request_id: int
    requester_id: Id
    read: Optional[Hashable]
    acks: frozenset[Id]


@dataclass(frozen=True)
class AbdState:
    seq: Seq
    val: Hashable
    phase: Phase1 | Phase2 | None = None


def _with_response(responses, src: Id, response) -> tuple:
    merged = dict(responses)
    merged[src] = response
    return tuple(sorted(merged.items()))


@dataclass(frozen=True)
class AbdActor(Actor[AbdState]):
    """A server of the replicated register, knowing the ids of its peers."""

    peers: tuple[Id, ...] = ()

    def __init__(self, peers: Iterable[Id] = ()) -> None:
        object.__setattr__(self, "peers", tuple(peers))

    @property
    def _quorum(self) -> int:
        return majority(len(self.peers) + 1)

    def on_start(self, id: Id, out: Out) -> AbdState:
        return AbdState(seq=(0, id), val=DEFAULT_VALUE, phase=None)

    def on_msg(self, id: Id, state: AbdState, src: Id, msg: Any, out: Out) -> AbdState | None:
        if isinstance(msg, (Put, Get)):
            if state.phase is not None:
                return None
            out.broadcast(self.peers, Internal(Query(msg.request_id)))
            return replace(
                state,
                phase=Phase1(
                    request_id=msg.request_id,
                    requester_id=src,
                    write=msg.value if isinstance(msg, Put) else None,
                    responses=((id, (state.seq, state.val)),),
                ),
            )
        if not isinstance(msg, Internal):
            return None
        inner = msg.msg
        if isinstance(inner, Query):
            out.send(src, Internal(AckQuery(inner.request_id, state.seq, state.val)))
            return None
        if isinstance(inner, AckQuery):
            return self._on_ack_query(id, state, src, inner, out)
        if isinstance(inner, Record):
            out.send(src, Internal(AckRecord(inner.request_id)))
            if inner.seq > state.seq:
                return replace(state, seq=inner.seq, val=inner.value)
            return None
        if isinstance(inner, AckRecord):
            return self._on_ack_record(state, src, inner, out)
        return None

    def _on_ack_query(self, id: Id, state: AbdState, src: Id, ack: AckQuery, out: Out):
        phase = state.phase
        if not isinstance(phase, Phase1) or phase.request_id != ack.request_id:
            return None
        responses = _with_response(phase.responses, src, (ack.seq, ack.value))
        if len(responses) != self._quorum:
            return replace(state, phase=replace(phase, responses=responses))

        # Sequencers are distinct, so the maximum is unambiguous.
        _, (seq, val) = max(responses, key=lambda item: item[1][0])
        if phase.write is not None:
            seq, val, read = (seq[0] + 1, id), phase.write, None
        else:
            read = val

        out.broadcast(self.peers, Internal(Record(phase.request_id, seq, val)))

        new_seq, new_val = (seq, val) if seq > state.seq else (state.seq, state.val)
        return AbdState(
            seq=new_seq,
            val=new_val,
            phase=Phase2(
                request_id=phase.request_id,
                requester_id=phase.requester_id,
                read=read,
                acks=frozenset({id}),
            ),
        )

    def _on_ack_record(self, state: AbdState, src: Id, ack: AckRecord, out: Out):
        phase = state.phase
        if (
            not isinstance(phase, Phase2)
            or phase.request_id != ack.request_id
            or src in phase.acks
        ):
            return None
        acks = phase.acks | {src}
        if len(acks) != self._quorum:
            return replace(state, phase=replace(phase, acks=acks))
        if phase.read is not None:
            reply = GetOk(phase.request_id, phase.read)
        else:
            reply = PutOk(phase.request_id)
        out.send(phase.requester_id, reply)
        return replace(state, phase=None)