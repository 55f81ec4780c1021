import copy
import threading

import pytest

from greenhouse.panels import SettingsPanel

BASE_SETTINGS = {
    "device": {"id": "TEST"},
    "environment": {
        "start_temp": "20", "start_humidity": "45", "start_moisture": "35",
        "temp_rate": 1, "humidity_rate": -2, "moisture_rate": -1, "refresh": 1,
    },
    "temperature": {"upper": 26, "lower": 18, "heat_rate": "2", "cool_rate": "3", "refresh": 1},
    "humidity": {"upper": 70, "lower": 40, "rate": "2.5", "refresh": 1},
    "moisture": {"upper": 60, "lower": 30, "rate": "1.5", "refresh": 1},
    "mqtt": {"enabled": False},
}


class RecordingPanel(SettingsPanel):
    """Silent panel that keeps every snapshot it is shown."""

    def __init__(self, code, settings=None):
        super().__init__(code, settings or {}, silent=True)
        self.snapshots = []

    def display_snapshot(self, snapshot):
        super().display_snapshot(snapshot)
        self.snapshots.append(dict(snapshot))


class StopAfter:
    """Fake tick wait: records requested seconds, asks the loop to stop on call n."""

    def __init__(self, n, on_call=None):
        self.n = n
        self.on_call = on_call
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, seconds):
        with self._lock:
            self.calls.append(seconds)
            count = len(self.calls)
        if self.on_call:
            self.on_call(count)
        return count >= self.n


@pytest.fixture
def settings():
    return copy.deepcopy(BASE_SETTINGS)
