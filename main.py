# main.py
import sys

# --- Local Imports ---
import constants
from app_log import AppLog
from config_manager import ConfigManager
import app_scanner
from instance_store import InstanceStore
from process_handler import DebugInstanceManager


class ElectronDebugManager(AppLog):
    def __init__(self, config_dir=None, store=None, echo=True):
        super().__init__(echo=echo)

        self.config_manager = ConfigManager(self, config_dir=config_dir)
        self.config_data = self.config_manager.load_config()

        self.apps_data = {}
        self.store = store if store is not None else InstanceStore()
        self.instance_manager = DebugInstanceManager(self, self.store)

    def scan_apps(self, platform=None):
        """Replace the discovery table with a fresh scan."""
        self.apps_data = app_scanner.scan_for_electron_apps(
            self,
            platform=platform,
            max_workers=self.config_manager.scan_workers,
            extra_roots=self.config_manager.extra_app_roots,
        )
        self._log(f"Discovery finished: {len(self.apps_data)} Electron app(s) found.")
        return self.apps_data

    def running_apps(self):
        return app_scanner.scan_for_running_apps(self, self.apps_data)

    def start_debugging(self, app_id, listener=None):
        if app_id not in self.apps_data:
            raise KeyError(f"Unknown app id: {app_id}")
        app_info = self.apps_data[app_id]

        already_running = self.running_apps().get(app_id)
        if already_running:
            self._log(f"'{app_info.name}' is already running (PID(s): {', '.join(map(str, already_running))}). "
                      f"Single-instance apps may hand off to it instead of starting a debug instance.", warning=True)

        return self.instance_manager.start_debugging(app_info, listener=listener)


def main():
    manager = ElectronDebugManager()
    if sys.platform not in (constants.PLATFORM_WINDOWS, constants.PLATFORM_MACOS):
        print(f"Electron app discovery is not supported on {sys.platform}.")
        return 1

    apps = manager.scan_apps()
    print("Discovered Electron apps:")
    for app_info in sorted(apps.values(), key=lambda a: a.name.lower()):
        print(f"- {app_info.name} @ {app_info.exe_path} ({app_info.id})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
