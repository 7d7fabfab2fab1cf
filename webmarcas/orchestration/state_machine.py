"""Canonical state transition helpers for workflow entities."""

from __future__ import annotations

from collections.abc import Hashable, Mapping

from webmarcas.core.exceptions import InvalidTransitionError
from webmarcas.models.enums import SignatureStatus


class StateMachine:
    """Explicit transition table; anything not listed is rejected."""

    def __init__(self, transitions: Mapping[Hashable, set]) -> None:
        self._transitions = transitions

    def can_transition(self, current: Hashable, target: Hashable) -> bool:
        return target in self._transitions.get(current, set())

    def assert_transition(self, current: Hashable, target: Hashable) -> None:
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(f"Transition not allowed: {_label(current)} -> {_label(target)}")


def _label(state: Hashable) -> str:
    return str(getattr(state, "value", state))


# Signature status only moves forward.
SIGNATURE_TRANSITIONS = StateMachine(
    {
        SignatureStatus.NOT_SIGNED: {SignatureStatus.PENDING, SignatureStatus.SIGNED},
        SignatureStatus.PENDING: {SignatureStatus.SIGNED},
        SignatureStatus.SIGNED: set(),
    }
)
