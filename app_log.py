# app_log.py
import threading
import time

import constants


class AppLog:
    """Collects manager messages; the core modules log through ``app._log``."""

    def __init__(self, echo=True):
        self.all_log_messages = []
        self.echo = echo
        self._lock = threading.Lock()

    def _log(self, message, error=False, warning=False):
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        prefix = constants.LOG_PREFIX_ERROR if error else constants.LOG_PREFIX_WARNING if warning else constants.LOG_PREFIX_INFO

        full_message = f"[{timestamp}] {prefix}{message}"
        with self._lock: # reader threads log concurrently
            self.all_log_messages.append(full_message)

        if self.echo and (error or warning):
            if constants.VERBOSE_LOGGING or error:
                print(full_message)
