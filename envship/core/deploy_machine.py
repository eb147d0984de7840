"""Deterministic deploy state machine.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- FAILED reachable from every non-terminal state
- No transition out of DONE or FAILED
- Every transition recorded in the history
"""

from __future__ import annotations

import logging

from envship.core.errors import InvalidTransitionError
from envship.models.deployment import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    DeployState,
    StateTransition,
)

logger = logging.getLogger(__name__)


class DeployMachine:
    """Tracks one ``deploy`` invocation through its states.

    Parameters
    ----------
    label:
        Name used in log lines and errors (usually the environment).
    """

    def __init__(self, label: str = "") -> None:
        self.label = label
        self._state = DeployState.PENDING
        self._history: list[StateTransition] = []

    @property
    def state(self) -> DeployState:
        return self._state

    @property
    def history(self) -> list[StateTransition]:
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    # ------------------------------------------------------------------
    # Transition logic
    # ------------------------------------------------------------------

    def transition(self, target: DeployState, detail: str = "") -> StateTransition:
        """Move to ``target``, recording the transition.

        Raises ``InvalidTransitionError`` if the move is not allowed.
        """
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {self.label or 'deploy'} from {self._state.value} "
                f"to {target.value}. Allowed: {sorted(s.value for s in allowed)}"
            )

        record = StateTransition(from_state=self._state, to_state=target, detail=detail)
        self._history.append(record)
        logger.debug(
            "%s: %s -> %s %s", self.label, self._state.value, target.value, detail
        )
        self._state = target
        return record

    def fail(self, detail: str) -> StateTransition:
        """Move to FAILED from any non-terminal state."""
        return self.transition(DeployState.FAILED, detail)

    def get_available_transitions(self) -> set[DeployState]:
        """Return the set of valid target states from the current state."""
        return set(VALID_TRANSITIONS.get(self._state, set()))
