"""
Simulation run state machine.

States:
  CREATED  - subsystems built; a recording may be chosen; not started
  RUNNING  - all four worker loops are ticking
  PAUSED   - loops park at their next tick boundary
  CLOSED   - streams closed; nothing can be restarted

Modes (chosen while CREATED, mutually exclusive):
  LIVE      - simulate without recording
  SAVING    - simulate and append every tick to a recording
  PLAYBACK  - replay a recording instead of simulating

Transitions:
  CREATED + start()   -> RUNNING
  RUNNING + pause()   -> PAUSED
  PAUSED  + resume()  -> RUNNING
  PAUSED  + pause()   -> PAUSED   (no-op)
  RUNNING + resume()  -> RUNNING  (no-op)
  any     + close()   -> CLOSED
"""

import threading

from greenhouse.errors import ModeConflictError, SimulationStateError


class SimulationStateMachine:
    """Thread-safe run state and recording mode for the orchestrator."""

    CREATED = 'CREATED'
    RUNNING = 'RUNNING'
    PAUSED = 'PAUSED'
    CLOSED = 'CLOSED'

    LIVE = 'LIVE'
    SAVING = 'SAVING'
    PLAYBACK = 'PLAYBACK'

    def __init__(self):
        self._state = self.CREATED
        self._mode = self.LIVE
        self._lock = threading.Lock()

    # ========== PUBLIC API ==========

    def get_state(self):
        with self._lock:
            return self._state

    def get_mode(self):
        with self._lock:
            return self._mode

    def select_mode(self, mode):
        """Choose SAVING or PLAYBACK before the run starts."""
        with self._lock:
            self._require_locked(self.CREATED, f"select {mode}")
            if self._mode == mode:
                raise SimulationStateError(f"{mode} already selected")
            if self._mode != self.LIVE:
                raise ModeConflictError(
                    f"Cannot select {mode}: simulation is already in {self._mode} mode"
                )
            self._mode = mode

    def clear_mode(self):
        """Back to LIVE after a recording could not be opened."""
        with self._lock:
            self._require_locked(self.CREATED, "clear the mode")
            self._mode = self.LIVE

    def start(self):
        with self._lock:
            self._require_locked(self.CREATED, "start")
            self._transition_locked(self.RUNNING)

    def pause(self):
        """Returns True when the state changed."""
        with self._lock:
            if self._state == self.PAUSED:
                return False
            self._require_locked(self.RUNNING, "pause")
            self._transition_locked(self.PAUSED)
            return True

    def resume(self):
        """Returns True when the state changed."""
        with self._lock:
            if self._state == self.RUNNING:
                return False
            self._require_locked(self.PAUSED, "resume")
            self._transition_locked(self.RUNNING)
            return True

    def close(self):
        """Returns False if already closed."""
        with self._lock:
            if self._state == self.CLOSED:
                return False
            self._transition_locked(self.CLOSED)
            return True

    # ========== INTERNAL (called while holding _lock) ==========

    def _require_locked(self, expected, action):
        if self._state != expected:
            raise SimulationStateError(f"Cannot {action} while {self._state}")

    def _transition_locked(self, new_state):
        print(f"[SIM] {self._state} -> {new_state}")
        self._state = new_state
