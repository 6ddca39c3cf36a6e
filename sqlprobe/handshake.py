# MIT License
# Copyright (c) 2026 Franz Granlund
# See LICENSE file in the project root for full license information.

"""Protocol 10 initial handshake decoder.

Layout of the payload, in order:

- protocol version (1)
- server version, NUL terminated
- connection id (4, little endian)
- auth-plugin-data part 1 (8)
- filler (1)
- capability flags, lower half (2)

Everything above is mandatory. Older servers may stop there; newer ones
continue with character set (1), status flags (2), capability flags upper
half (2), auth-plugin-data length (1) and 10 reserved bytes, followed by
auth-plugin-data part 2 and, with CLIENT_PLUGIN_AUTH, the plugin name.

The decoder checks that each field it reads is fully present. It does not
cross-check fields against each other, so a forged but plausible length
byte can shift the part 2 / plugin name boundary unnoticed.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Optional

from .constants import (
    AUTH_PLUGIN_DATA_PART1_LEN,
    CAPABILITIES,
    CLIENT_PLUGIN_AUTH,
    MIN_AUTH_PLUGIN_DATA_PART2_LEN,
    RESERVED_LEN,
)
from .errors import DecodeError, DecodeReason

logger = logging.getLogger(__name__)

# connection id, auth-plugin-data part 1, filler, capability flags lower
_PREFIX_TAIL = struct.Struct(f"<I{AUTH_PLUGIN_DATA_PART1_LEN}sxH")

_EXTENDED_FIELDS = (
    ("character_set", struct.Struct("<B")),
    ("status_flags", struct.Struct("<H")),
    ("capability_flags_upper", struct.Struct("<H")),
    ("auth_plugin_data_len", struct.Struct("<B")),
    (None, struct.Struct(f"{RESERVED_LEN}x")),
)


@dataclass(frozen=True)
class HandshakePacket:
    protocol_version: int
    server_version: str
    connection_id: int
    auth_plugin_data_part1: bytes
    capability_flags_lower: int
    capability_flag: int
    character_set: Optional[int] = None
    status_flags: Optional[int] = None
    capability_flags_upper: Optional[int] = None
    auth_plugin_data_len: Optional[int] = None
    auth_plugin_data_part2: bytes = b""
    auth_plugin_name: Optional[str] = None

    def has_capability(self, flag):
        if isinstance(flag, str):
            flag = CAPABILITIES[flag]
        return bool(self.capability_flag & flag)

    def capability_names(self):
        return sorted(
            name for name, bit in CAPABILITIES.items() if self.capability_flag & bit
        )

    @property
    def auth_plugin_data(self):
        part2 = self.auth_plugin_data_part2
        if part2.endswith(b"\x00"):
            part2 = part2[:-1]
        return self.auth_plugin_data_part1 + part2


def decode_handshake(payload, expect_protocol_version=None):
    """Decode a handshake payload into a ``HandshakePacket``.

    Raises ``DecodeError`` when a field runs past the end of the payload,
    or when ``expect_protocol_version`` is given and does not match.
    """
    buf = bytes(payload)
    size = len(buf)
    if size < 1:
        raise DecodeError(DecodeReason.TRUNCATED_PREFIX, "empty payload")
    protocol_version = buf[0]
    pos = 1

    end = buf.find(b"\x00", pos)
    if end < 0:
        raise DecodeError(
            DecodeReason.UNTERMINATED_VERSION_STRING, "server version has no NUL terminator"
        )
    server_version = buf[pos:end].decode("utf-8", errors="replace")
    pos = end + 1

    if size - pos < _PREFIX_TAIL.size:
        raise DecodeError(
            DecodeReason.TRUNCATED_PREFIX,
            f"payload ends {_PREFIX_TAIL.size - (size - pos)} bytes short of the capability flags",
        )
    connection_id, part1, capability_lower = _PREFIX_TAIL.unpack_from(buf, pos)
    pos += _PREFIX_TAIL.size

    extended = {}
    complete = True
    for name, field in _EXTENDED_FIELDS:
        if pos == size:
            complete = False
            break
        if size - pos < field.size:
            raise DecodeError(
                DecodeReason.TRUNCATED_EXTENDED_FIELDS,
                f"payload cut inside {name or 'reserved bytes'} at offset {pos}",
            )
        if name:
            extended[name] = field.unpack_from(buf, pos)[0]
        pos += field.size

    capability_upper = extended.get("capability_flags_upper")
    capability_flag = capability_lower | ((capability_upper or 0) << 16)

    part2 = b""
    plugin_name = None
    if complete:
        want = max(
            MIN_AUTH_PLUGIN_DATA_PART2_LEN,
            extended["auth_plugin_data_len"] - AUTH_PLUGIN_DATA_PART1_LEN,
        )
        part2 = buf[pos:pos + want]
        pos += len(part2)
        if capability_flag & CLIENT_PLUGIN_AUTH and pos < size:
            end = buf.find(b"\x00", pos)
            if end < 0:
                end = size
            plugin_name = buf[pos:end].decode("utf-8", errors="replace")

    packet = HandshakePacket(
        protocol_version=protocol_version,
        server_version=server_version,
        connection_id=connection_id,
        auth_plugin_data_part1=part1,
        capability_flags_lower=capability_lower,
        capability_flag=capability_flag,
        character_set=extended.get("character_set"),
        status_flags=extended.get("status_flags"),
        capability_flags_upper=capability_upper,
        auth_plugin_data_len=extended.get("auth_plugin_data_len"),
        auth_plugin_data_part2=part2,
        auth_plugin_name=plugin_name,
    )
    if expect_protocol_version is not None and protocol_version != expect_protocol_version:
        raise DecodeError(
            DecodeReason.UNSUPPORTED_PROTOCOL_VERSION,
            f"protocol {protocol_version} != {expect_protocol_version}",
        )
    logger.debug(
        "handshake: protocol=%d version=%s connection_id=%d capabilities=%#x",
        protocol_version,
        server_version,
        connection_id,
        capability_flag,
    )
    return packet
