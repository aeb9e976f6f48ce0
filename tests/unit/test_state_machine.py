"""Unit tests for configuration state machine."""

import pytest

from curator.config.state_machine import (
    ConfigState,
    ConfigStateError,
    ConfigStateMachine,
)


class TestConfigStateMachine:
    """Tests for ConfigStateMachine."""

    @pytest.mark.unit
    def test_initial_state(self) -> None:
        """Test that initial state is UNLOADED."""
        assert ConfigStateMachine().state == ConfigState.UNLOADED

    @pytest.mark.unit
    def test_happy_path(self) -> None:
        """Test UNLOADED -> LOADING -> VALIDATED -> READY."""
        machine = ConfigStateMachine()
        for state in (ConfigState.LOADING, ConfigState.VALIDATED, ConfigState.READY):
            machine.transition(state)
        assert machine.state == ConfigState.READY

    @pytest.mark.unit
    def test_cannot_skip_validation(self) -> None:
        """Test that LOADING cannot jump to READY."""
        machine = ConfigStateMachine()
        machine.transition(ConfigState.LOADING)

        with pytest.raises(ConfigStateError) as exc_info:
            machine.transition(ConfigState.READY)

        assert exc_info.value.from_state == ConfigState.LOADING
        assert exc_info.value.to_state == ConfigState.READY

    @pytest.mark.unit
    def test_failed_is_terminal(self) -> None:
        """Test that nothing follows FAILED."""
        machine = ConfigStateMachine()
        machine.transition(ConfigState.FAILED)

        for state in ConfigState:
            assert not machine.can_transition(state)

    @pytest.mark.unit
    def test_error_message(self) -> None:
        """Test the transition error message."""
        error = ConfigStateError(ConfigState.READY, ConfigState.LOADING)
        assert str(error) == "Invalid state transition: READY -> LOADING"
