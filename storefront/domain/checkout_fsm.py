"""Checkout attempt state transitions (single source of truth)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


class CheckoutState:
    EDITING = "editing"
    VALIDATING = "validating"
    AWAITING_PAYMENT = "awaiting_payment"
    VERIFYING = "verifying"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: Mapping[str, frozenset[str]] = {
    CheckoutState.EDITING: frozenset({CheckoutState.VALIDATING}),
    CheckoutState.VALIDATING: frozenset(
        {
            CheckoutState.AWAITING_PAYMENT,
            CheckoutState.FAILED,
        }
    ),
    CheckoutState.AWAITING_PAYMENT: frozenset(
        {
            CheckoutState.VERIFYING,
            CheckoutState.CANCELLED,
            CheckoutState.FAILED,
        }
    ),
    CheckoutState.VERIFYING: frozenset(
        {
            CheckoutState.CONFIRMED,
            CheckoutState.FAILED,
        }
    ),
    CheckoutState.FAILED: frozenset({CheckoutState.EDITING}),
    CheckoutState.CANCELLED: frozenset({CheckoutState.EDITING}),
    CheckoutState.CONFIRMED: frozenset(),
}

TERMINAL_STATES = frozenset({CheckoutState.CONFIRMED})

# States that hand control back to the form.
RECOVERABLE_STATES = frozenset({CheckoutState.FAILED, CheckoutState.CANCELLED})


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None


def validate_checkout_transition(current: str, target: str) -> TransitionValidationResult:
    if target not in ALLOWED_TRANSITIONS:
        return TransitionValidationResult(False, f"Unsupported state: {target}")
    if current not in ALLOWED_TRANSITIONS:
        return TransitionValidationResult(False, f"Unsupported current state: {current}")
    if current in TERMINAL_STATES:
        return TransitionValidationResult(False, f"Checkout already '{current}'.")
    if target not in ALLOWED_TRANSITIONS[current]:
        return TransitionValidationResult(False, f"Transition '{current} -> {target}' is not allowed.")
    return TransitionValidationResult(True)


class CheckoutStateMachine:
    """Tracks one checkout attempt; raises on an illegal transition."""

    def __init__(self, state: str = CheckoutState.EDITING) -> None:
        self.state = state
        self.history: list[str] = [state]

    def transition(self, target: str) -> None:
        result = validate_checkout_transition(self.state, target)
        if not result.allowed:
            raise RuntimeError(result.reason)
        self.state = target
        self.history.append(target)

    def reset(self) -> None:
        """Return to the form after a failure or cancellation."""
        if self.state in RECOVERABLE_STATES:
            self.transition(CheckoutState.EDITING)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES
