# process_handler.py
import os
import subprocess
import threading
import uuid
from dataclasses import dataclass
from typing import Any

import psutil

import constants


class SpawnFailure(RuntimeError):
    """The debug target could not be started; its registry entry is already gone."""

    def __init__(self, app_info, cause):
        super().__init__(f"Could not start '{app_info.name}' ({app_info.exe_path}): {cause}")
        self.app_info = app_info
        self.cause = cause


@dataclass(frozen=True)
class InstanceEvent:
    kind: str # "node_port", "window_port", "log" or "terminated"
    instance_id: str
    value: Any = None


class DebugSession:
    """Handle for one launched debug instance.

    Listeners are called on the reader/watcher threads with an InstanceEvent.
    Pass a listener to ``start_debugging`` to be sure not to miss early events.
    """

    def __init__(self, app, instance_id, app_info, process):
        self.app = app
        self.instance_id = instance_id
        self.app_id = app_info.id
        self.app_name = app_info.name
        self.process = process
        self.node_port = None
        self.window_port = None
        self.returncode = None
        self._listeners = []
        self._lock = threading.Lock()
        self._terminated = threading.Event()

    @property
    def pid(self):
        return self.process.pid

    def subscribe(self, listener):
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def wait(self, timeout=None):
        """Block until the instance is gone; returns the exit code, or None on timeout."""
        self._terminated.wait(timeout)
        return self.returncode

    def is_running(self):
        if self._terminated.is_set() or self.process.poll() is not None:
            return False
        return psutil.pid_exists(self.pid)

    def _claim_port(self, field_name, port):
        with self._lock:
            if getattr(self, field_name) is not None:
                return False
            setattr(self, field_name, port)
            return True

    def _emit(self, kind, value=None):
        event = InstanceEvent(kind=kind, instance_id=self.instance_id, value=value)
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                self.app._log(f"Listener failed on '{kind}' event for '{self.app_name}' ({self.instance_id}): {e}", error=True)

    def _finish(self, returncode):
        self.returncode = returncode
        self._emit("terminated", returncode)
        self._terminated.set()


class DebugInstanceManager:
    def __init__(self, app, store):
        self.app = app
        self.store = store
        self.sessions = {}
        self._sessions_lock = threading.Lock()

    def start_debugging(self, app_info, listener=None):
        """Launch *app_info* with inspector flags and return its DebugSession.

        Returns as soon as the process is started. Raises SpawnFailure if the
        executable cannot be started.
        """
        instance_id = str(uuid.uuid4())
        self.store.add_instance(instance_id, app_info.id)

        cmd = [app_info.exe_path, *constants.DEBUG_FLAGS]
        process_flags = subprocess.CREATE_NO_WINDOW if os.name == 'nt' else 0
        try:
            process = subprocess.Popen(
                cmd, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                text=True, bufsize=1, encoding='utf-8', errors='replace',
                creationflags=process_flags
            )
        except OSError as e:
            self.store.remove_instance(instance_id)
            self.app._log(f"Failed to start '{app_info.name}' for debugging: {e}", error=True)
            raise SpawnFailure(app_info, e) from e

        self.app._log(f"Started '{app_info.name}' for debugging (PID: {process.pid}, instance {instance_id}).")
        session = DebugSession(self.app, instance_id, app_info, process)
        if listener is not None:
            session.subscribe(listener)
        with self._sessions_lock:
            self.sessions[instance_id] = session

        readers = [
            threading.Thread(target=self._read_stream, args=(session, process.stdout, "stdout"), daemon=True),
            threading.Thread(target=self._read_stream, args=(session, process.stderr, "stderr"), daemon=True),
        ]
        watcher = threading.Thread(target=self._watch_exit, args=(session, readers), daemon=True)
        for reader in readers:
            reader.start()
        watcher.start()
        return session

    def active_sessions(self):
        with self._sessions_lock:
            return list(self.sessions.values())

    def _read_stream(self, session, stream, stream_name):
        try:
            for chunk in iter(stream.readline, ''):
                self._handle_output(session, chunk)
        except (OSError, ValueError) as e:
            self.app._log(f"Lost {stream_name} of '{session.app_name}' ({session.instance_id}): {e}", warning=True)
        finally:
            stream.close()

    def _handle_output(self, session, chunk):
        instance = self.store.get_instance(session.instance_id)
        if instance is not None:
            if instance.node_port is None:
                self._detect_port(session, chunk, "node_port", constants.NODE_PORT_PATTERN, self.store.update_node_port)
            if instance.window_port is None:
                self._detect_port(session, chunk, "window_port", constants.WINDOW_PORT_PATTERN, self.store.update_window_port)

        self.store.update_log(session.instance_id, chunk)
        session._emit("log", chunk)

    def _detect_port(self, session, chunk, field_name, pattern, update):
        match = pattern.search(chunk)
        if not match:
            return
        port = int(match.group(1))
        if session._claim_port(field_name, port):
            update(session.instance_id, port)
            self.app._log(f"Detected {field_name.replace('_', ' ')} {port} for '{session.app_name}' ({session.instance_id})")
            session._emit(field_name, port)

    def _watch_exit(self, session, readers):
        for reader in readers:
            reader.join()
        return_code = session.process.wait()

        self.store.remove_instance(session.instance_id)
        with self._sessions_lock:
            self.sessions.pop(session.instance_id, None)

        if return_code == 0:
            self.app._log(f"'{session.app_name}' ({session.instance_id}) exited gracefully (code 0).")
        else:
            self.app._log(f"'{session.app_name}' ({session.instance_id}) exited with code {return_code}.", warning=True)
        session._finish(return_code)
