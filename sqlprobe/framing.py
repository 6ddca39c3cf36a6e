# MIT License
# Copyright (c) 2026 Franz Granlund
# See LICENSE file in the project root for full license information.

"""Wire framing: 3-byte little-endian payload length, 1-byte sequence id,
then the payload.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass

from .constants import HEADER_LEN
from .errors import ErrorKind, ProbeError
from .util import read_exact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawFrame:
    sequence_number: int
    payload: bytes


def parse_header(header):
    length = header[0] | (header[1] << 8) | (header[2] << 16)
    return length, header[3]


def _read(sock, total, deadline, what):
    try:
        return read_exact(sock, total, deadline)
    except socket.timeout as exc:
        raise ProbeError(ErrorKind.READ_TIMEOUT, f"timed out reading {what}") from exc
    except OSError as exc:
        raise ProbeError(ErrorKind.READ_FAILED, f"error reading {what}: {exc}") from exc


def read_frame(sock, deadline, expected_sequence=0):
    header = _read(sock, HEADER_LEN, deadline, "header")
    if len(header) < HEADER_LEN:
        raise ProbeError(
            ErrorKind.READ_FAILED,
            f"incomplete header: got {len(header)} of {HEADER_LEN} bytes",
        )
    payload_len, sequence = parse_header(header)
    if sequence != expected_sequence:
        raise ProbeError(
            ErrorKind.SEQUENCE_ERROR,
            f"unexpected sequence number {sequence}, want {expected_sequence}",
        )
    logger.debug("frame header: length=%d sequence=%d", payload_len, sequence)

    payload = _read(sock, payload_len, deadline, "payload")
    if len(payload) < payload_len:
        raise ProbeError(
            ErrorKind.READ_FAILED,
            f"incomplete payload: got {len(payload)} of {payload_len} bytes",
        )
    return RawFrame(sequence_number=sequence, payload=payload)
