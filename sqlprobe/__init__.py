"""Lightweight liveness probe for MySQL-protocol servers.

Reads the unauthenticated initial handshake and nothing more.
"""

from .client import fetch_handshake, probe
from .errors import DecodeError, DecodeReason, ErrorKind, ProbeError
from .framing import RawFrame, read_frame
from .handshake import HandshakePacket, decode_handshake

__all__ = [
    "DecodeError",
    "DecodeReason",
    "ErrorKind",
    "HandshakePacket",
    "ProbeError",
    "RawFrame",
    "decode_handshake",
    "fetch_handshake",
    "probe",
    "read_frame",
]
