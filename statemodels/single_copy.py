"""A server exposing a rewritable single-copy register.

Each server keeps its own copy and does not coordinate with others, so a
system of more than one such server is not linearizable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable

from .actor import Actor, Id, Out
from .register import DEFAULT_VALUE, Get, GetOk, Put, PutOk

__all__ = ["SingleCopyActor"]


@dataclass(frozen=True)
class SingleCopyActor(Actor[Hashable]):
    """Stores the last value put and answers reads with it."""

    def on_start(self, id: Id, out: Out) -> Hashable:
        return DEFAULT_VALUE

    def on_msg(self, id: Id, state: Hashable, src: Id, msg: Any, out: Out) -> Hashable | None:
        if isinstance(msg, Put):
            out.send(src, PutOk(msg.request_id))
            return msg.value
        if isinstance(msg, Get):
            out.send(src, GetOk(msg.request_id, state))
        return None