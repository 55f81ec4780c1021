"""Shared recording file - one queued writer for saving, one reader per loop for playback"""

import queue
import threading

from greenhouse.records import encode_record, read_records

_STOP = "__STOP__"


class RecordWriter:
    """
    Append target shared by every worker loop.

    Loops never touch the file: they enqueue Record values and a single
    writer thread renders and appends them, one complete line per write.
    """

    def __init__(self, path, on_error=None):
        self.path = str(path)
        self.on_error = on_error
        self._queue = queue.Queue()
        self._file = open(self.path, 'a', encoding='utf-8')
        self._closed = False
        self._close_lock = threading.Lock()
        self._thread = threading.Thread(target=self._writer_loop, name="record-writer", daemon=True)
        self._thread.start()
        print(f"[RECORDER] Saving to {self.path}")

    def submit(self, record):
        """Queue a record for appending. Raises OSError once closed."""
        if self._closed:
            raise OSError(f"Recording {self.path} is closed")
        self._queue.put(record)

    def _writer_loop(self):
        while True:
            item = self._queue.get()
            if item == _STOP:
                break
            try:
                self._file.write(encode_record(item) + "\n")
                self._file.flush()
            except (OSError, ValueError) as exc:
                self._report(f"Could not write record: {exc}", item)

    def _report(self, message, record=None):
        """on_error(message, record) gets the failed record, or None for file errors."""
        print(f"[RECORDER] ERROR: {message}")
        if self.on_error:
            self.on_error(message, record)

    def close(self, timeout=2):
        """Drain pending records, then close the file. Safe to call twice."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._queue.put(_STOP)
        self._thread.join(timeout=timeout)
        try:
            self._file.close()
        except OSError as exc:
            self._report(f"Could not close {self.path}: {exc}")


class PlaybackReader:
    """
    Independent read stream over a recording.
    Each loop opens its own so cursors are never shared.
    """

    def __init__(self, path):
        self.path = str(path)
        self._file = open(self.path, 'r', encoding='utf-8')

    def records(self, tag):
        """Yield this reader's records matching tag until the file is exhausted."""
        return read_records(self._file, tag)

    def close(self):
        if not self._file.closed:
            self._file.close()
