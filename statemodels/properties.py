"""Properties that a model checker evaluates against the states of a model."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable

__all__ = ["Expectation", "Property"]


class Expectation(enum.Enum):
    """How a property's condition is expected to relate to reachable states."""

    ALWAYS = "always"
    """The condition holds in every reachable state."""
    SOMETIMES = "sometimes"
    """The condition holds in at least one reachable state."""
    EVENTUALLY = "eventually"
    """The condition holds at some point along every behaviour."""


@dataclass(frozen=True)
class Property:
    """A named condition over ``(model, state)`` with an expectation."""

    expectation: Expectation
    name: str
    condition: Callable[[Any, Any], bool]

    @classmethod
    def always(cls, name: str, condition: Callable[[Any, Any], bool]) -> "Property":
        """A property whose condition must hold in every reachable state."""
        return cls(Expectation.ALWAYS, name, condition)

    @classmethod
    def sometimes(cls, name: str, condition: Callable[[Any, Any], bool]) -> "Property":
        """A property whose condition must hold in some reachable state."""
        return cls(Expectation.SOMETIMES, name, condition)

    @classmethod
    def eventually(cls, name: str, condition: Callable[[Any, Any], bool]) -> "Property":
        """A property whose condition must eventually hold on every path."""
        return cls(Expectation.EVENTUALLY, name, condition)

    def holds(self, model: Any, state: Any) -> bool:
        """Evaluates the condition for a state of a model."""
        return bool(self.condition(model, state))