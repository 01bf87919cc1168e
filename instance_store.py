# instance_store.py
import threading
from dataclasses import dataclass, field, replace
from typing import List, Optional


@dataclass
class InstanceInfo:
    id: str
    app_id: str
    node_port: Optional[int] = None
    window_port: Optional[int] = None
    log: List[str] = field(default_factory=list)

    @property
    def log_text(self):
        return "".join(self.log)


class InstanceStore:
    """In-memory registry of running debug instances.

    Every operation runs under one lock so updates arriving from the reader
    threads of different instances are applied one at a time. Reads return
    copies; callers never hold a reference into the registry.
    """

    def __init__(self):
        self._instances = {}
        self._lock = threading.Lock()

    def add_instance(self, instance_id, app_id):
        with self._lock:
            self._instances[instance_id] = InstanceInfo(id=instance_id, app_id=app_id)

    def remove_instance(self, instance_id):
        with self._lock:
            self._instances.pop(instance_id, None)

    def update_node_port(self, instance_id, port):
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is not None and instance.node_port is None:
                instance.node_port = int(port)

    def update_window_port(self, instance_id, port):
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is not None and instance.window_port is None:
                instance.window_port = int(port)

    def update_log(self, instance_id, chunk):
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is not None:
                instance.log.append(chunk)

    def get_instance(self, instance_id):
        with self._lock:
            instance = self._instances.get(instance_id)
            if instance is None:
                return None
            return replace(instance, log=list(instance.log))

    def all_instances(self):
        with self._lock:
            return {iid: replace(inst, log=list(inst.log)) for iid, inst in self._instances.items()}
