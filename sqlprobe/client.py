# MIT License
# Copyright (c) 2026 Franz Granlund
# See LICENSE file in the project root for full license information.

import logging
import time

from .connector import connect
from .constants import DEFAULT_TIMEOUT, PROTOCOL_VERSION
from .errors import ProbeError
from .framing import read_frame
from .handshake import decode_handshake

logger = logging.getLogger(__name__)


def fetch_handshake(address, timeout=DEFAULT_TIMEOUT, expect_protocol_version=PROTOCOL_VERSION):
    """Connect, read the server greeting and decode it.

    One deadline of ``timeout`` seconds covers connect and read. Nothing is
    written to the server. Raises ``ProbeError``.
    """
    deadline = time.monotonic() + timeout
    target = str(address)
    with connect(address, deadline) as sock:
        try:
            frame = read_frame(sock, deadline)
        except ProbeError as exc:
            exc.address = exc.address or target
            raise
    try:
        return decode_handshake(frame.payload, expect_protocol_version)
    except ProbeError as exc:
        exc.address = target
        raise


def probe(address, timeout=DEFAULT_TIMEOUT, expect_protocol_version=PROTOCOL_VERSION):
    """Return ``(packet, None)`` on success or ``(None, error)`` on failure."""
    try:
        packet = fetch_handshake(address, timeout, expect_protocol_version)
    except ProbeError as exc:
        logger.debug("probe %s failed: %s", address, exc)
        return None, exc
    return packet, None
