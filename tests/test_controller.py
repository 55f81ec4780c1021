import pytest

from greenhouse.controllers import GreenhouseController, SimulationStateMachine
from greenhouse.errors import InvalidRateError, ModeConflictError, SimulationStateError, ValidationError
from greenhouse.records import parse_record
from greenhouse.simulators import WorkerLoop


def one_tick(seconds):
    return True


def never_stop(seconds):
    return False


def join_all(controller):
    for loop in controller.loops.values():
        loop.thread.join(timeout=2)
        assert not loop.thread.is_alive()


def test_setup_seeds_sensors_from_environment(settings):
    controller = GreenhouseController(settings, silent=True)
    assert controller.setup() is True
    assert controller.models['temperature'].get_current() == 20
    assert controller.models['humidity'].get_current() == 45
    assert controller.models['moisture'].get_current() == 35
    assert controller.models['environment'].get_start('humidity') == 45
    controller.close()


def test_invalid_input_blocks_every_loop(settings):
    settings['humidity']['rate'] = "0"
    settings['environment']['start_moisture'] = "150"
    controller = GreenhouseController(settings, silent=True)

    assert controller.start() is False
    assert all(loop.thread is None for loop in controller.loops.values())
    assert controller.state.get_state() == SimulationStateMachine.CREATED
    assert "positive" in controller.panels['humidity'].get_errors()[0]
    assert "out of bounds" in controller.panels['environment'].get_errors()[0]
    controller.close()


def test_live_run_one_tick_each(settings):
    controller = GreenhouseController(settings, wait=one_tick, silent=True)
    assert controller.start() is True
    join_all(controller)

    status = controller.get_status()
    assert status['state'] == SimulationStateMachine.RUNNING
    assert status['mode'] == SimulationStateMachine.LIVE
    for code, info in status['subsystems'].items():
        assert info['ticks'] == 1
        assert info['snapshot'] is not None
    assert all(not panel.editable for panel in controller.panels.values())
    controller.close()
    assert controller.get_status()['state'] == SimulationStateMachine.CLOSED


def test_save_then_play_back(settings, tmp_path):
    path = tmp_path / "run.csv"

    saver = GreenhouseController(settings, wait=one_tick, silent=True)
    saver.save_to(path)
    assert saver.start() is True
    join_all(saver)
    saver.close()

    lines = path.read_text(encoding="utf-8").splitlines()
    records = {parse_record(line).tag: parse_record(line) for line in lines}
    assert sorted(records) == ['E', 'H', 'M', 'T']
    assert records['E'].fields['start_temp'] == 20
    assert records['E'].fields['humidity_rate'] == -2
    assert all(r.interval == 1 for r in records.values())

    player = GreenhouseController({}, wait=never_stop, silent=True)
    player.open_file(path)
    assert player.start() is True
    join_all(player)

    assert all(not panel.enabled for panel in player.panels.values())
    for code in ('temperature', 'humidity', 'moisture'):
        assert player.loops[code].state == WorkerLoop.FINISHED
        snapshot = player.panels[code].get_snapshot()
        recorded = records[code[0].upper()].fields
        assert snapshot['current'] == pytest.approx(recorded['current'])
        assert snapshot['upper'] == recorded['upper']
        assert snapshot['lower'] == recorded['lower']
    env = player.panels['environment'].get_snapshot()
    assert env['moisture']['start'] == 35
    assert env['temperature']['rate'] == 1
    player.close()


def test_save_and_playback_are_exclusive(settings, tmp_path):
    path = tmp_path / "run.csv"
    path.write_text("", encoding="utf-8")

    saver = GreenhouseController(settings, silent=True)
    saver.save_to(tmp_path / "out.csv")
    with pytest.raises(ModeConflictError):
        saver.open_file(path)
    saver.close()

    player = GreenhouseController(settings, silent=True)
    player.open_file(path)
    with pytest.raises(ModeConflictError):
        player.save_to(tmp_path / "out2.csv")
    assert not (tmp_path / "out2.csv").exists()
    player.close()


def test_failed_open_leaves_live_mode(settings, tmp_path):
    controller = GreenhouseController(settings, silent=True)
    with pytest.raises(OSError):
        controller.open_file(tmp_path / "missing.csv")
    assert controller.state.get_mode() == SimulationStateMachine.LIVE
    assert all(loop.mode == WorkerLoop.LIVE for loop in controller.loops.values())
    controller.close()


def test_recording_cannot_be_chosen_after_start(settings, tmp_path):
    controller = GreenhouseController(settings, wait=one_tick, silent=True)
    controller.start()
    with pytest.raises(SimulationStateError):
        controller.save_to(tmp_path / "late.csv")
    with pytest.raises(SimulationStateError):
        controller.start()
    controller.close()


def test_pause_resume_fan_out(settings):
    controller = GreenhouseController(settings, silent=True)
    with pytest.raises(SimulationStateError):
        controller.pause()
    controller.start()
    controller.pause()
    assert all(loop.is_paused() for loop in controller.loops.values())
    assert controller.state.get_state() == SimulationStateMachine.PAUSED
    controller.resume()
    assert not any(loop.is_paused() for loop in controller.loops.values())
    controller.resume()
    controller.close()
    for loop in controller.loops.values():
        assert not loop.thread.is_alive()


def test_update_routes_to_subsystem(settings):
    controller = GreenhouseController(settings, silent=True)
    controller.setup()
    controller.update('temperature', upper=24, cool_rate=-1.5)
    assert controller.models['temperature'].get_range() == (24, 18)
    assert controller.models['temperature'].get_rates() == (2, 1.5)
    with pytest.raises(InvalidRateError):
        controller.update('moisture', rate=0)
    assert controller.models['moisture'].get_rise_rate() == 1.5
    controller.close()
    with pytest.raises(SimulationStateError):
        controller.update('moisture', rate=2)


def test_close_twice_and_without_streams(settings):
    controller = GreenhouseController(settings, silent=True)
    controller.close()
    controller.close()
    assert all(panel.get_errors() == [] for panel in controller.panels.values())


def test_handle_command_unknown_returns_none(settings):
    controller = GreenhouseController(settings, silent=True)
    assert controller.handle_command('zz') is None
    assert controller.handle_command('s') is True
    controller.close()


def test_write_failures_reach_the_subsystem_panels(settings, tmp_path):
    controller = GreenhouseController(settings, wait=one_tick, silent=True)
    controller.save_to(tmp_path / "run.csv")
    controller.writer._file.close()
    assert controller.start() is True
    join_all(controller)
    controller.close()

    assert len(controller.get_status()['recording_errors']) == 4
    for panel in controller.panels.values():
        errors = panel.get_errors()
        assert len(errors) == 1
        assert errors[0].startswith("Recording failed")


def test_failed_update_leaves_previous_values(settings):
    controller = GreenhouseController(settings, silent=True)
    controller.setup()
    with pytest.raises(ValidationError):
        controller.update('temperature', heat_rate=9, upper="abc")
    assert controller.models['temperature'].get_rates() == (2, 3)
    assert controller.models['temperature'].get_range() == (26, 18)
    controller.close()


def test_show_status_uses_panel_format(settings, capsys):
    controller = GreenhouseController(settings, wait=one_tick, silent=True)
    controller.start()
    join_all(controller)
    capsys.readouterr()
    controller.show_status()
    out = capsys.readouterr().out
    assert "band=[40, 70]" in out
    assert "humidity=" in out
    controller.close()
