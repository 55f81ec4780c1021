"""Greenhouse controller - builds the four subsystems and runs them together"""

from greenhouse.components import EnvironmentModel, HumidityModel, MoistureModel, TemperatureModel
from greenhouse.controllers.simulation_state import SimulationStateMachine
from greenhouse.errors import GreenhouseError, SimulationStateError
from greenhouse.mqtt_publisher import MQTTBatchPublisher
from greenhouse.panels import SettingsPanel
from greenhouse.recording import RecordWriter
from greenhouse.simulators import (
    EnvironmentSimulator,
    HumiditySimulator,
    MoistureSimulator,
    TemperatureSimulator,
    WorkerLoop,
)


class GreenhouseController:
    """
    Orchestrator for one simulation run.

    - setup() validates all four subsystems; nothing starts unless all pass
    - start/pause/resume fan out to every worker loop
    - save_to() and open_file() pick SAVING or PLAYBACK, never both
    - close() stops the loops and releases every stream
    """

    CODES = ('environment', 'temperature', 'humidity', 'moisture')

    def __init__(self, settings, panels=None, wait=None, silent=False):
        self.settings = settings
        self.device_info = settings.get("device", {})
        self.publisher = MQTTBatchPublisher(settings.get("mqtt", {}), self.device_info)
        self.state = SimulationStateMachine()
        self.writer = None
        self.recording_errors = []

        self.models = {
            'temperature': TemperatureModel(),
            'humidity': HumidityModel(),
            'moisture': MoistureModel(),
            'environment': EnvironmentModel(),
        }
        self.panels = dict(panels or {})
        for code in self.CODES:
            if code not in self.panels:
                self.panels[code] = SettingsPanel(
                    code, settings.get(code, {}), publisher=self.publisher, silent=silent
                )

        self.loops = {}
        self._init_subsystems(wait)

    # ========== INIT ==========

    def _init_subsystems(self, wait):
        m, p = self.models, self.panels
        sensors = {name: m[name] for name in ('temperature', 'humidity', 'moisture')}
        simulators = {
            'environment': EnvironmentSimulator(m['environment'], p['environment'], sensors),
            'temperature': TemperatureSimulator(m['temperature'], p['temperature']),
            'humidity': HumiditySimulator(m['humidity'], p['humidity']),
            'moisture': MoistureSimulator(m['moisture'], p['moisture']),
        }
        for code in self.CODES:
            self.loops[code] = WorkerLoop(simulators[code], p[code], wait=wait)

    # ========== FILES ==========

    def save_to(self, path):
        """Create the shared append target and hand it to every loop."""
        self.state.select_mode(SimulationStateMachine.SAVING)
        try:
            self.writer = RecordWriter(path, on_error=self._on_record_error)
        except OSError:
            self.state.clear_mode()
            raise
        for loop in self.loops.values():
            loop.save_to(self.writer)

    def open_file(self, path):
        """Every loop opens its own reader over the same recording."""
        self.state.select_mode(SimulationStateMachine.PLAYBACK)
        try:
            for loop in self.loops.values():
                loop.open_file(path)
        except OSError:
            for loop in self.loops.values():
                loop.detach()
            self.state.clear_mode()
            raise
        print(f"[SIM] Simulation playback from {path}")

    def _on_record_error(self, message, record):
        """Runs on the writer thread. Show the failure on the panel that produced the record."""
        self.recording_errors.append(message)
        codes = [code for code, loop in self.loops.items()
                 if record is not None and loop.simulator.TAG == record.tag]
        for code in codes or self.CODES:
            self.panels[code].display_error(f"Recording failed: {message}")

    # ========== CONTROL ==========

    def setup(self):
        """Validate every subsystem, reporting each failure. True only if all pass."""
        if self.state.get_state() != SimulationStateMachine.CREATED:
            raise SimulationStateError(f"Cannot set up while {self.state.get_state()}")
        results = [self.loops[code].setup() for code in self.CODES]
        return all(results)

    def start(self):
        """Set up and start all four loops. Returns False if validation failed."""
        if not self.setup():
            return False
        self.state.start()

        playback = self.state.get_mode() == SimulationStateMachine.PLAYBACK
        for panel in self.panels.values():
            panel.set_editable(False)
            if playback:
                panel.enable(False)

        self.publisher.start()
        for code in self.CODES:
            self.loops[code].start()
        print("[SIM] Running...")
        return True

    def pause(self):
        if self.state.pause():
            for loop in self.loops.values():
                loop.pause()

    def resume(self):
        if self.state.resume():
            for loop in self.loops.values():
                loop.resume()

    def update(self, code, **values):
        """Explicit operator change for one subsystem while the run is live."""
        if self.state.get_state() == SimulationStateMachine.CLOSED:
            raise SimulationStateError("Simulation is closed")
        if code not in self.loops:
            raise KeyError(code)
        self.loops[code].update(values)

    def close(self):
        """Stop everything and close all streams. Errors are reported, not raised."""
        if not self.state.close():
            return
        for loop in self.loops.values():
            loop.close()
        if self.writer is not None:
            self.writer.close()
        self.publisher.stop()

    # ========== STATUS ==========

    def get_status(self):
        status = {
            'state': self.state.get_state(),
            'mode': self.state.get_mode(),
            'recording_errors': list(self.recording_errors),
            'subsystems': {},
        }
        for code in self.CODES:
            loop = self.loops[code]
            status['subsystems'][code] = {
                'loop': loop.state,
                'paused': loop.is_paused(),
                'ticks': loop.ticks,
                'snapshot': self.panels[code].get_snapshot(),
            }
        return status

    def show_status(self):
        """Print status to console"""
        status = self.get_status()
        print("\n" + "=" * 50)
        print(f"GREENHOUSE STATUS  {status['state']} / {status['mode']}")
        print("=" * 50)
        for code, info in status['subsystems'].items():
            snapshot = info['snapshot']
            line = "-" if snapshot is None else self.panels[code].describe(snapshot)
            print(f"  [{code.upper():<11}] {info['loop']:<8} {line}")
        if status['recording_errors']:
            print(f"  Recording errors: {len(status['recording_errors'])}")
        print("=" * 50)

    # ========== COMMANDS ==========

    def handle_command(self, cmd):
        """Handle a console command. Returns None for unknown commands."""
        try:
            if cmd == 's':
                self.show_status()
            elif cmd == '1':
                if not self.start():
                    print("[SIM] Not started - fix the reported values first")
            elif cmd == 'p':
                self.pause()
            elif cmd == 'r':
                self.resume()
            elif cmd == 'l':
                path = input("Recording to play back: ").strip()
                if path:
                    self.open_file(path)
            elif cmd == 'w':
                path = input("Save recording to: ").strip()
                if path:
                    self.save_to(path)
            else:
                return None
        except (GreenhouseError, OSError) as e:
            print(f"[ERROR] {e}")
        return True
