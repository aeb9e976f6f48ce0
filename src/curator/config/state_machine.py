"""Configuration loading state machine."""

from enum import Enum, auto
from typing import ClassVar


class ConfigState(Enum):
    """Configuration loading states.

    UNLOADED -> LOADING -> VALIDATED -> READY, with FAILED reachable from
    any non-terminal state.
    """

    UNLOADED = auto()
    LOADING = auto()
    VALIDATED = auto()
    READY = auto()
    FAILED = auto()


class ConfigStateError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: ConfigState, to_state: ConfigState) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition: {from_state.name} -> {to_state.name}"
        )


class ConfigStateMachine:
    """Enforces the order in which configuration is loaded and frozen."""

    VALID_TRANSITIONS: ClassVar[dict[ConfigState, frozenset[ConfigState]]] = {
        ConfigState.UNLOADED: frozenset({ConfigState.LOADING, ConfigState.FAILED}),
        ConfigState.LOADING: frozenset({ConfigState.VALIDATED, ConfigState.FAILED}),
        ConfigState.VALIDATED: frozenset({ConfigState.READY, ConfigState.FAILED}),
        ConfigState.READY: frozenset({ConfigState.FAILED}),
        ConfigState.FAILED: frozenset(),
    }

    def __init__(self) -> None:
        self._state = ConfigState.UNLOADED

    @property
    def state(self) -> ConfigState:
        """Current state."""
        return self._state

    def can_transition(self, to_state: ConfigState) -> bool:
        """Check whether moving to ``to_state`` is allowed."""
        return to_state in self.VALID_TRANSITIONS[self._state]

    def transition(self, to_state: ConfigState) -> None:
        """Move to a new state.

        Raises:
            ConfigStateError: If the transition is not allowed.
        """
        if not self.can_transition(to_state):
            raise ConfigStateError(self._state, to_state)
        self._state = to_state
