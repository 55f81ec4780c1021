import pytest

from greenhouse.controllers import SimulationStateMachine
from greenhouse.errors import ModeConflictError, SimulationStateError


@pytest.fixture
def machine():
    return SimulationStateMachine()


def test_initial_state(machine):
    assert machine.get_state() == SimulationStateMachine.CREATED
    assert machine.get_mode() == SimulationStateMachine.LIVE


def test_full_lifecycle(machine):
    machine.select_mode(SimulationStateMachine.SAVING)
    machine.start()
    assert machine.pause() is True
    assert machine.pause() is False
    assert machine.get_state() == SimulationStateMachine.PAUSED
    assert machine.resume() is True
    assert machine.resume() is False
    assert machine.close() is True
    assert machine.close() is False
    assert machine.get_mode() == SimulationStateMachine.SAVING


def test_save_and_playback_exclude_each_other(machine):
    machine.select_mode(SimulationStateMachine.PLAYBACK)
    with pytest.raises(ModeConflictError):
        machine.select_mode(SimulationStateMachine.SAVING)
    with pytest.raises(SimulationStateError):
        machine.select_mode(SimulationStateMachine.PLAYBACK)


def test_clear_mode_returns_to_live(machine):
    machine.select_mode(SimulationStateMachine.PLAYBACK)
    machine.clear_mode()
    machine.select_mode(SimulationStateMachine.SAVING)
    assert machine.get_mode() == SimulationStateMachine.SAVING


def test_mode_is_fixed_once_started(machine):
    machine.start()
    with pytest.raises(SimulationStateError):
        machine.select_mode(SimulationStateMachine.SAVING)
    with pytest.raises(SimulationStateError):
        machine.start()


def test_pause_and_resume_need_a_running_simulation(machine):
    with pytest.raises(SimulationStateError):
        machine.pause()
    with pytest.raises(SimulationStateError):
        machine.resume()
    machine.close()
    with pytest.raises(SimulationStateError):
        machine.start()


def test_transitions_are_logged(machine, capsys):
    machine.start()
    assert "[SIM] CREATED -> RUNNING" in capsys.readouterr().out
