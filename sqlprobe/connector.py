# MIT License
# Copyright (c) 2026 Franz Granlund
# See LICENSE file in the project root for full license information.

"""Transport connection under a deadline.

A MySQL-protocol server speaks first, so a connection is only usable once
the socket turns readable: either the greeting arrived or the peer closed.
The kernel finishes the TCP handshake for a listener that never calls
accept(), so dialing alone proves nothing; the readiness wait is what races
the peer against the deadline.
"""

import logging
import selectors
import socket

from .errors import ErrorKind, ProbeError
from .util import format_address, parse_address, remaining

logger = logging.getLogger(__name__)


def _wait_readable(sock, deadline):
    with selectors.DefaultSelector() as selector:
        selector.register(sock, selectors.EVENT_READ)
        return bool(selector.select(remaining(deadline)))


def connect(address, deadline):
    """Return a connected socket that has data or an orderly close pending.

    The socket is closed before any error leaves this function.
    """
    try:
        host, port = parse_address(address)
    except ValueError as exc:
        raise ProbeError(ErrorKind.CONNECT_FAILED, str(exc), address=str(address)) from exc
    target = format_address(host, port)

    timeout = remaining(deadline)
    if timeout <= 0:
        raise ProbeError(ErrorKind.CONNECT_TIMEOUT, "deadline exceeded before dial", address=target)

    logger.debug("dialing %s (timeout %.3fs)", target, timeout)
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except socket.timeout as exc:
        raise ProbeError(ErrorKind.CONNECT_TIMEOUT, "dial timed out", address=target) from exc
    except OSError as exc:
        raise ProbeError(ErrorKind.CONNECT_FAILED, str(exc), address=target) from exc
    except (UnicodeError, ValueError, OverflowError) as exc:
        # Host names that cannot be IDNA-encoded never reach the resolver.
        raise ProbeError(ErrorKind.CONNECT_FAILED, str(exc), address=target) from exc

    try:
        ready = _wait_readable(sock, deadline)
    except BaseException:
        sock.close()
        raise
    if not ready:
        sock.close()
        raise ProbeError(
            ErrorKind.CONNECT_TIMEOUT,
            "peer sent neither data nor close before the deadline",
            address=target,
        )
    logger.debug("connected to %s", target)
    return sock
