"""
Pytest bootstrap.

- Add repo root to sys.path so the flat modules import without installing.
- Shared builders for icon containers, app bundles and stub executables.
"""

import os
import plistlib
import stat
import struct
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app_log import AppLog  # noqa: E402

PNG_PAYLOAD = b"\x89PNG\r\n\x1a\n" + bytes(range(20))


def build_icns(entries):
    """Build an icns blob from (type, payload) pairs."""
    body = b"".join(
        entry_type.encode("latin-1") + struct.pack(">i", len(payload) + 8) + payload
        for entry_type, payload in entries
    )
    return b"icns" + struct.pack(">i", len(body) + 8) + body


def build_electron_bundle(parent, name="Acme", info=None, icon_bytes=None):
    """Create a minimal macOS Electron .app bundle under *parent*."""
    bundle = parent / f"{name}.app"
    (bundle / "Contents" / "Frameworks" / "Electron Framework.framework").mkdir(parents=True)
    (bundle / "Contents" / "MacOS").mkdir(parents=True)
    (bundle / "Contents" / "Resources").mkdir(parents=True)

    if info is None:
        info = {
            "CFBundleIdentifier": "com.acme.app",
            "CFBundleDisplayName": "Acme",
            "CFBundleExecutable": "Acme",
            "CFBundleIconFile": "icon.icns",
        }
    with open(bundle / "Contents" / "Info.plist", "wb") as f:
        plistlib.dump(info, f)

    if icon_bytes is None:
        icon_bytes = build_icns([("ic10", PNG_PAYLOAD)])
    (bundle / "Contents" / "Resources" / "icon.icns").write_bytes(icon_bytes)
    return bundle


def write_stub_executable(path, script):
    """Write a /bin/sh script to *path* and make it executable."""
    path.write_text("#!/bin/sh\n" + script, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def log_app():
    return AppLog(echo=False)
