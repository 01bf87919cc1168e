# app_scanner.py
import os
import plistlib
import sys
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from xml.parsers.expat import ExpatError

import psutil

import constants
from icns_reader import read_icns_as_image_uri


class UnsupportedPlatformError(RuntimeError):
    pass


@dataclass(frozen=True)
class AppInfo:
    id: str
    name: str
    icon: str
    app_path: str
    exe_path: str


def _readdir_absolute(dir_path):
    try:
        return [os.path.join(dir_path, name) for name in sorted(os.listdir(dir_path))]
    except OSError:
        return []


def get_possible_app_paths(app, platform=None, extra_roots=()):
    platform = platform or sys.platform
    if platform == constants.PLATFORM_WINDOWS:
        roots = constants.WINDOWS_APP_ROOTS
    elif platform == constants.PLATFORM_MACOS:
        roots = constants.MACOS_APP_ROOTS
    else:
        app._log(f"App discovery is not supported on '{platform}'. No apps will be listed.", warning=True)
        return []

    app_paths = []
    for root in [*roots, *extra_roots]:
        children = _readdir_absolute(root)
        if not children:
            app._log(f"No candidates under '{root}' (missing, empty or unreadable).")
        app_paths.extend(children)
    return app_paths


def _windows_app_info(app, app_path):
    try:
        files = sorted(os.listdir(app_path))
    except OSError:
        # ENOTDIR for plain files, EPERM/EACCES for protected folders
        return None

    is_electron_based = os.path.exists(os.path.join(app_path, constants.WINDOWS_ELECTRON_MARKER)) or any(
        os.path.exists(os.path.join(app_path, name, constants.WINDOWS_ELECTRON_MARKER)) for name in files
    )
    if not is_electron_based:
        return None

    suffix = constants.WINDOWS_EXE_SUFFIX
    exe_file = next(
        (name for name in files
         if name.lower().endswith(suffix)
         and not any(keyword in name.lower() for keyword in constants.WINDOWS_EXE_EXCLUDE_KEYWORDS)),
        None,
    )
    if exe_file is None:
        app._log(f"Electron app at '{app_path}' has no launchable {suffix} file.", warning=True)
        return None

    app_path = os.path.abspath(app_path)
    return AppInfo(
        id=str(uuid.uuid4()), # no registry lookup, so ids change between scans
        name=exe_file[:-len(suffix)],
        icon="",
        app_path=app_path,
        exe_path=os.path.join(app_path, exe_file),
    )


def _plist_string(info, key):
    value = info[key]
    if not isinstance(value, str):
        raise ValueError(f"Info.plist key '{key}' is not a string: {value!r}")
    return value


def _macos_app_info(app, app_path):
    if not os.path.exists(os.path.join(app_path, constants.MACOS_ELECTRON_MARKER)):
        return None

    with open(os.path.join(app_path, constants.MACOS_INFO_PLIST), "rb") as f:
        info = plistlib.load(f)
    if not isinstance(info, dict):
        raise ValueError(f"Info.plist root is a {type(info).__name__}, not a dict")

    bundle_id = _plist_string(info, "CFBundleIdentifier")
    executable = _plist_string(info, "CFBundleExecutable")
    if "CFBundleDisplayName" in info:
        name = _plist_string(info, "CFBundleDisplayName")
    elif "CFBundleName" in info:
        name = _plist_string(info, "CFBundleName")
    else:
        name = os.path.splitext(os.path.basename(app_path))[0]

    icon = ""
    icon_file = _plist_string(info, "CFBundleIconFile") if "CFBundleIconFile" in info else ""
    if icon_file:
        if not os.path.splitext(icon_file)[1]:
            icon_file += ".icns"
        icon_path = os.path.join(app_path, constants.MACOS_RESOURCES_DIR, icon_file)
        try:
            icon = read_icns_as_image_uri(icon_path)
        except OSError as e:
            app._log(f"Could not read icon '{icon_path}': {e}", warning=True)

    app_path = os.path.abspath(app_path)
    return AppInfo(
        id=bundle_id,
        name=name,
        icon=icon,
        app_path=app_path,
        exe_path=os.path.join(app_path, constants.MACOS_EXECUTABLE_DIR, executable),
    )


def get_app_info(app, app_path, platform=None):
    """Return an AppInfo if *app_path* holds an Electron app, otherwise None.

    Raises UnsupportedPlatformError outside Windows and macOS. On macOS, an
    unreadable Info.plist or icon container propagates to the caller.
    """
    platform = platform or sys.platform
    if platform == constants.PLATFORM_WINDOWS:
        return _windows_app_info(app, app_path)
    if platform == constants.PLATFORM_MACOS:
        return _macos_app_info(app, app_path)
    raise UnsupportedPlatformError(f"platform not supported: {platform}")


def scan_for_electron_apps(app, platform=None, max_workers=None, extra_roots=()):
    platform = platform or sys.platform
    app_paths = get_possible_app_paths(app, platform, extra_roots)
    app._log(f"Scanning {len(app_paths)} candidate paths for Electron apps...")

    def probe(app_path):
        try:
            return get_app_info(app, app_path, platform)
        except (OSError, ValueError, KeyError, ExpatError) as e:
            app._log(f"Skipping '{app_path}': {type(e).__name__}: {e}", warning=True)
            return None

    with ThreadPoolExecutor(max_workers=max_workers or constants.DEFAULT_SCAN_WORKERS) as pool:
        results = list(pool.map(probe, app_paths))

    discovered_apps = {}
    for info in results:
        if info is None:
            continue
        app._log(f"Found Electron app '{info.name}' at {info.app_path}")
        discovered_apps[info.id] = info
    return discovered_apps


def scan_for_running_apps(app, apps_map):
    """Map app ids to the pids of processes already running their executable."""
    exe_to_app_id = {os.path.normcase(os.path.abspath(info.exe_path)): app_id for app_id, info in apps_map.items()}
    running = {}
    try:
        for proc in psutil.process_iter(['pid', 'exe']):
            proc_exe = proc.info.get('exe')
            if not proc_exe: # None when access is denied
                continue
            app_id = exe_to_app_id.get(os.path.normcase(os.path.abspath(proc_exe)))
            if app_id is not None:
                running.setdefault(app_id, []).append(proc.info['pid'])
                app._log(f"Detected running process PID {proc.info['pid']} for '{apps_map[app_id].name}'")
    except psutil.Error as e:
        app._log(f"Error during running process scan: {e}", error=True)
    return running
