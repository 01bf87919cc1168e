# constants.py
from pathlib import Path
import re

# --- Logging ---
VERBOSE_LOGGING = False # Set to True to echo warnings as well as errors

# --- Paths & Config ---
APP_NAME_FOR_CONFIG = "ElectronDebugManager" # Used for creating app-specific config folder
CONFIG_FILE_NAME = "config.json" # General name, will be inside APP_NAME_FOR_CONFIG folder
DEFAULT_SCAN_WORKERS = 8

# --- Supported platforms ---
PLATFORM_WINDOWS = "win32"
PLATFORM_MACOS = "darwin"

# --- Install roots ---
WINDOWS_APP_ROOTS = [
    str(Path.home() / "AppData" / "Local"),
    "c:/Program Files",
    "c:/Program Files (x86)",
]
MACOS_APP_ROOTS = ["/Applications"]

# --- Electron detection (Windows) ---
WINDOWS_ELECTRON_MARKER = Path("resources") / "electron.asar"
WINDOWS_EXE_SUFFIX = ".exe"
WINDOWS_EXE_EXCLUDE_KEYWORDS = ["uninstall", "update"] # installer/updater helpers

# --- Electron detection (macOS) ---
MACOS_ELECTRON_MARKER = Path("Contents") / "Frameworks" / "Electron Framework.framework"
MACOS_INFO_PLIST = Path("Contents") / "Info.plist"
MACOS_RESOURCES_DIR = Path("Contents") / "Resources"
MACOS_EXECUTABLE_DIR = Path("Contents") / "MacOS"

# --- Debug launch ---
DEBUG_FLAGS = ["--inspect=0", "--remote-debugging-port=0"]
NODE_PORT_PATTERN = re.compile(r"Debugger listening on ws://127.0.0.1:(\d+)/")
WINDOW_PORT_PATTERN = re.compile(r"DevTools listening on ws://127.0.0.1:(\d+)/")

# --- Icon container ---
ICNS_HEADER_SIZE = 8
PNG_DATA_URI_PREFIX = "data:image/png;base64,"

# --- Log Prefixes ---
LOG_PREFIX_INFO = ""
LOG_PREFIX_WARNING = "[WARN] "
LOG_PREFIX_ERROR = "[ERR] "
