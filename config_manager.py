# config_manager.py
import json
from pathlib import Path
import sys
import os
import constants

def get_app_config_dir():
    """Gets the OS-dependent application configuration directory."""
    app_name = constants.APP_NAME_FOR_CONFIG
    if sys.platform == "win32":
        # %APPDATA%\AppName
        return Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming")) / app_name
    elif sys.platform == "darwin":
        # ~/Library/Application Support/AppName
        return Path.home() / "Library" / "Application Support" / app_name
    else: # Linux and other XDG-based systems
        # ~/.config/AppName
        return Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config")) / app_name

class ConfigManager:
    def __init__(self, app_instance, config_dir=None):
        self.app = app_instance
        self.config_dir = Path(config_dir) if config_dir else get_app_config_dir()
        self.config_file_path = self.config_dir / constants.CONFIG_FILE_NAME
        self.data = {}

    def load_config(self):
        if self.config_file_path.exists():
            try:
                with open(self.config_file_path, 'r', encoding='utf-8') as f:
                    self.data = json.load(f)
                self.app._log(f"Config loaded from: {self.config_file_path}")
            except json.JSONDecodeError:
                self.app._log(f"Error decoding config file: {self.config_file_path}. Using defaults.", error=True)
                self.data = {}
            except OSError as e:
                self.app._log(f"Error loading config file {self.config_file_path}: {e}. Using defaults.", error=True)
                self.data = {}
        else:
            self.app._log(f"Config file not found at {self.config_file_path}. Using defaults.")
            self.data = {} # Ensure data is an empty dict if file not found

        if not isinstance(self.data, dict):
            self.app._log(f"Config file {self.config_file_path} is not a JSON object. Using defaults.", error=True)
            self.data = {}

        roots = self.data.get("extra_app_roots")
        if not isinstance(roots, list) or not all(isinstance(r, str) for r in roots):
            if roots is not None:
                self.app._log(f"Ignoring invalid 'extra_app_roots' value: {roots!r}", warning=True)
            self.data["extra_app_roots"] = []

        workers = self.data.get("scan_workers")
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
            if workers is not None:
                self.app._log(f"Ignoring invalid 'scan_workers' value: {workers!r}", warning=True)
            self.data["scan_workers"] = constants.DEFAULT_SCAN_WORKERS

        return self.data

    @property
    def extra_app_roots(self):
        return list(self.data.get("extra_app_roots", []))

    @property
    def scan_workers(self):
        return self.data.get("scan_workers", constants.DEFAULT_SCAN_WORKERS)

    def save_config(self):
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True) # Ensure directory exists
            with open(self.config_file_path, 'w', encoding='utf-8') as f:
                json.dump(self.data, f, indent=2)
            self.app._log(f"Config saved to: {self.config_file_path}")
        except OSError as e:
            self.app._log(f"Error saving config file {self.config_file_path}: {e}", error=True)
