"""Snapshot publisher - forwards subsystem snapshots to remote displays over MQTT"""

import json
import multiprocessing
import queue
import time

import paho.mqtt.client as mqtt

_STOP = "__STOP__"


def flatten_snapshot(snapshot):
    """
    Environment snapshots nest one dict per quantity; remote displays
    get flat keys instead, e.g. {"humidity_current": 43.0}.
    """
    flat = {}
    for key, value in snapshot.items():
        if isinstance(value, dict):
            for field, inner in value.items():
                flat[f"{key}_{field}"] = inner
        else:
            flat[key] = value
    return flat


class SnapshotBatcher:
    """
    Groups snapshots per subsystem and publishes each group on
    <prefix>/<subsystem>. A group goes out when it reaches max_batch
    items or when it is older than batch_interval seconds.
    """

    def __init__(self, client, device_id, prefix="greenhouse", qos=1,
                 batch_interval=2.0, max_batch=50, clock=time.monotonic):
        self.client = client
        self.device_id = device_id
        self.prefix = prefix.rstrip("/")
        self.qos = qos
        self.batch_interval = batch_interval
        self.max_batch = max_batch
        self._clock = clock
        self._batches = {}
        self._opened = {}

    def topic(self, subsystem):
        return f"{self.prefix}/{subsystem}"

    def add(self, item):
        subsystem = item.get("subsystem", "unknown")
        entry = flatten_snapshot(item.get("value", {}))
        entry["ts"] = item.get("ts")
        if subsystem not in self._batches:
            self._batches[subsystem] = []
            self._opened[subsystem] = self._clock()
        self._batches[subsystem].append(entry)
        if len(self._batches[subsystem]) >= self.max_batch:
            self.flush(subsystem)

    def poll(self):
        """Publish every group that has waited long enough."""
        now = self._clock()
        for subsystem in list(self._batches):
            if now - self._opened[subsystem] >= self.batch_interval:
                self.flush(subsystem)

    def flush(self, subsystem=None):
        names = [subsystem] if subsystem is not None else list(self._batches)
        for name in names:
            items = self._batches.pop(name, None)
            self._opened.pop(name, None)
            if not items:
                continue
            payload = json.dumps({
                "device": self.device_id,
                "subsystem": name,
                "count": len(items),
                "items": items,
            })
            self.client.publish(self.topic(name), payload, qos=self.qos)


def _make_client():
    return mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)


def _publisher_process(config, device_info, q, client_factory=_make_client):
    host = config.get("host", "localhost")
    port = int(config.get("port", 1883))
    username = config.get("username")

    client = client_factory()
    if username:
        client.username_pw_set(username, config.get("password"))

    try:
        client.connect(host, port, 60)
    except OSError as exc:
        print(f"[MQTT] Connection to {host}:{port} failed: {exc}")
        return

    client.loop_start()
    batcher = SnapshotBatcher(
        client,
        device_info.get("id"),
        prefix=config.get("topic_prefix", "greenhouse"),
        qos=int(config.get("qos", 1)),
        batch_interval=float(config.get("batch_interval", 2.0)),
        max_batch=int(config.get("max_batch", 50)),
    )
    try:
        while True:
            try:
                item = q.get(timeout=0.2)
            except queue.Empty:
                batcher.poll()
                continue
            if item == _STOP:
                batcher.flush()
                break
            batcher.add(item)
            batcher.poll()
    finally:
        client.loop_stop()
        client.disconnect()


class MQTTBatchPublisher:
    """
    Forwards snapshots to a broker from a background process so a slow
    or missing broker never stalls a worker loop.
    """

    def __init__(self, config, device_info):
        self.config = config or {}
        self.device_info = device_info or {}
        self.enabled = bool(self.config.get("enabled", False))
        self._queue = multiprocessing.Queue(maxsize=1000) if self.enabled else None
        self._process = None

    def start(self):
        if not self.enabled or self._process is not None:
            return
        self._process = multiprocessing.Process(
            target=_publisher_process,
            args=(self.config, self.device_info, self._queue),
            daemon=True
        )
        self._process.start()
        print(f"[MQTT] Publishing snapshots to {self.config.get('host', 'localhost')}")

    def enqueue(self, item):
        """Queue one snapshot; dropped when disabled, not started, or the queue is full."""
        if self._process is None:
            return False
        try:
            self._queue.put_nowait(item)
        except queue.Full:
            return False
        return True

    def stop(self):
        if self._process and self._process.is_alive():
            try:
                self._queue.put_nowait(_STOP)
            except queue.Full:
                self._process.terminate()
            self._process.join(timeout=2)
