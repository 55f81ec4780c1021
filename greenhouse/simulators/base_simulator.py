"""Worker loop - one thread per subsystem, live or playback"""

import threading

from greenhouse.errors import GreenhouseError, SimulationStateError, ValidationError
from greenhouse.panels import REFRESH_MAX, REFRESH_MIN
from greenhouse.recording import PlaybackReader


class WorkerLoop:
    """
    Drives one subsystem simulator on its own thread.

    Live: tick the simulator, show the snapshot, queue a record when
    saving, then sleep for the refresh interval.
    Playback: read this subsystem's records from an independent reader
    and sleep for the interval stored in each record.

    The only suspension point is the end of each sleep: a paused loop
    blocks there until resume() or stop().
    """

    LIVE = 'LIVE'
    SAVING = 'SAVING'
    PLAYBACK = 'PLAYBACK'

    CREATED = 'CREATED'
    READY = 'READY'
    RUNNING = 'RUNNING'
    FINISHED = 'FINISHED'
    FAULTED = 'FAULTED'
    STOPPED = 'STOPPED'

    def __init__(self, simulator, panel, wait=None, join_timeout=1):
        self.simulator = simulator
        self.panel = panel
        self.code = simulator.CODE
        self.mode = self.LIVE
        self.state = self.CREATED
        self.refresh_interval_ms = 0
        self.running = True
        self.ticks = 0
        self.thread = None
        self.join_timeout = join_timeout

        self._pause_cond = threading.Condition()
        self._stop_event = threading.Event()
        # wait(seconds) -> True once a stop has been requested
        self._wait = wait or self._stop_event.wait
        self._writer = None
        self._reader = None

    # ========== FILES ==========

    def save_to(self, writer):
        """Share the orchestrator's record writer with this loop."""
        self._writer = writer
        self.mode = self.SAVING

    def open_file(self, path):
        """Open this loop's own reader over the recording at path."""
        self._reader = PlaybackReader(path)
        self.mode = self.PLAYBACK

    def detach(self):
        """Drop any recording and go back to live mode (before start only)."""
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        self._writer = None
        self.mode = self.LIVE

    def _append(self):
        try:
            self._writer.submit(self.simulator.record(self.refresh_interval_ms // 1000))
        except OSError as exc:
            self.panel.display_error(str(exc))

    # ========== LIFECYCLE ==========

    def setup(self):
        """Load starting values from the panel. Always succeeds in playback."""
        if self.mode == self.PLAYBACK:
            self.state = self.READY
            return True
        try:
            self.refresh_interval_ms = self.simulator.setup() * 1000
        except GreenhouseError as exc:
            self.panel.display_error(f"Error: {exc}")
            return False
        self.state = self.READY
        return True

    def start(self):
        if self.thread is not None:
            raise SimulationStateError(f"{self.code} loop already started")
        self.state = self.RUNNING
        self.thread = threading.Thread(target=self.run, name=f"{self.code}-loop", daemon=True)
        self.thread.start()

    def pause(self):
        """Takes effect at the next tick boundary; a sleep in progress is not cut short."""
        with self._pause_cond:
            self.running = False

    def resume(self):
        with self._pause_cond:
            self.running = True
            self._pause_cond.notify()

    def is_paused(self):
        with self._pause_cond:
            return not self.running

    def stop(self):
        self._stop_event.set()
        with self._pause_cond:
            self._pause_cond.notify_all()

    def close(self):
        """Stop the thread and release whichever stream this loop holds. Never raises."""
        self.stop()
        if self.thread is not None and self.thread is not threading.current_thread():
            self.thread.join(timeout=self.join_timeout)
        if self._reader is not None:
            try:
                self._reader.close()
            except OSError as exc:
                self.panel.display_error(str(exc))
        self._writer = None
        if self.state in (self.CREATED, self.READY, self.RUNNING):
            self.state = self.STOPPED

    def update(self, values):
        """Apply operator changes while running; refresh is handled here."""
        if self.mode == self.PLAYBACK:
            raise SimulationStateError("Settings cannot be changed during playback")
        values = dict(values)
        refresh = values.pop("refresh", None)
        if refresh is not None:
            if not isinstance(refresh, int) or isinstance(refresh, bool) \
                    or not REFRESH_MIN <= refresh <= REFRESH_MAX:
                raise ValidationError(
                    f"Refresh rate must be between {REFRESH_MIN} and {REFRESH_MAX} seconds"
                )
        if values:
            self.simulator.apply_update(values)
        if refresh is not None:
            self.refresh_interval_ms = int(refresh) * 1000

    # ========== THREAD ==========

    def run(self):
        self.state = self.RUNNING
        try:
            if self.mode == self.PLAYBACK:
                self._run_playback()
            else:
                self._run_live()
        except Exception as exc:
            self.state = self.FAULTED
            self.panel.display_error(f"Unexpected failure, {self.code} stopped: {exc}")
            return
        if self.state == self.RUNNING:
            self.state = self.STOPPED

    def _tick_boundary(self, milliseconds):
        """Sleep, then park while paused. Returns False once stopped."""
        if self._wait(milliseconds / 1000.0):
            return False
        with self._pause_cond:
            while not self.running and not self._stop_event.is_set():
                self._pause_cond.wait()
        return not self._stop_event.is_set()

    def _run_live(self):
        while not self._stop_event.is_set():
            try:
                snapshot = self.simulator.tick()
            except GreenhouseError as exc:
                self.panel.display_error(f"Error: {exc}")
            else:
                self.panel.display_snapshot(snapshot)
            if self.mode == self.SAVING:
                self._append()
            self.ticks += 1
            if not self._tick_boundary(self.refresh_interval_ms):
                return

    def _run_playback(self):
        try:
            for record in self._reader.records(self.simulator.TAG):
                snapshot = self.simulator.replay(record)
                self.panel.display_snapshot(snapshot)
                self.ticks += 1
                if not self._tick_boundary(record.interval * 1000):
                    return
        except (GreenhouseError, OSError) as exc:
            self.state = self.FAULTED
            self.panel.display_error(str(exc))
            return
        self.state = self.FINISHED
        self.panel.display_status("Playback finished")
