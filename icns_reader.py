# icns_reader.py
import base64
import struct
from dataclasses import dataclass
from pathlib import Path

import constants


class IcnsFormatError(ValueError):
    """Raised when an icon container is truncated or declares impossible sizes."""


class NoIconEntriesError(IcnsFormatError):
    """Raised when an icon container holds no icon entries at all."""


@dataclass(frozen=True)
class IcnsEntry:
    type: str
    size: int
    data: bytes


def read_icns_entries(data):
    """Split an icns blob into its entries, in file order.

    The header is a 4-byte magic followed by the big-endian length of the
    whole file. Every entry carries its own 4-byte type and a big-endian
    length that includes the 8-byte entry header.
    """
    if len(data) < constants.ICNS_HEADER_SIZE:
        raise IcnsFormatError(f"icon container too short ({len(data)} bytes)")

    total_size = struct.unpack_from(">i", data, 4)[0] - constants.ICNS_HEADER_SIZE
    body = data[constants.ICNS_HEADER_SIZE:]

    entries = []
    start = 0
    while start < total_size:
        if start + 8 > len(body):
            raise IcnsFormatError(f"entry header at offset {start} runs past end of data")
        entry_type = body[start:start + 4].decode("latin-1")
        size = struct.unpack_from(">i", body, start + 4)[0]
        if size < 8 or start + size > len(body):
            raise IcnsFormatError(f"entry '{entry_type}' at offset {start} declares bad length {size}")

        entries.append(IcnsEntry(type=entry_type, size=size, data=body[start + 8:start + size]))
        start += size

    return entries


def icns_to_image_uri(data):
    entries = read_icns_entries(data)
    if not entries:
        raise NoIconEntriesError("icon container has no entries")

    # sorted() is stable, so the first of several equally large entries wins
    largest = sorted(entries, key=lambda entry: entry.size, reverse=True)[0]
    image_data = largest.data

    # Offset-1 check on purpose; it matches "\x89PNG" and nothing else here.
    if image_data[1:4] == b"PNG":
        return constants.PNG_DATA_URI_PREFIX + base64.b64encode(image_data).decode("ascii")

    # No decoder for the older raw/JPEG 2000 icon variants
    return ""


def read_icns_as_image_uri(file_path):
    return icns_to_image_uri(Path(file_path).read_bytes())
