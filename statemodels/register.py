"""Messages of a register service that clients use to write and read a value.

Clients send ``Put`` and ``Get`` requests and servers answer with ``PutOk``
and ``GetOk``.  Servers talk to each other with protocol-specific messages
wrapped in ``Internal``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Union

__all__ = ["DEFAULT_VALUE", "Put", "Get", "PutOk", "GetOk", "Internal", "RegisterMsg"]

DEFAULT_VALUE = "\0"
"""The value a register holds before anything is written to it."""


@dataclass(frozen=True)
class Put:
    """A request to write ``value`` into the register."""

    request_id: int
    value: Hashable


@dataclass(frozen=True)
class Get:
    """A request to read the register."""

    request_id: int


@dataclass(frozen=True)
class PutOk:
    """Acknowledges that the write of a ``Put`` request is complete."""

    request_id: int


@dataclass(frozen=True)
class GetOk:
    """Answers a ``Get`` request with the value read."""

    request_id: int
    value: Hashable


@dataclass(frozen=True)
class Internal:
    """A message exchanged between servers, private to their protocol."""

    msg: Any


RegisterMsg = Union[Put, Get, PutOk, GetOk, Internal]