# MIT License
# Copyright (c) 2026 Franz Granlund
# See LICENSE file in the project root for full license information.

import re
import socket
import time


def matches_expect(value, expect, expect_regex):
    if expect is None:
        return True
    if expect_regex:
        return re.search(str(expect), value) is not None
    return str(expect) in value


def remaining(deadline):
    return max(deadline - time.monotonic(), 0.0)


def read_exact(sock, total, deadline):
    """Read up to ``total`` bytes, stopping early only at end of stream.

    Raises ``socket.timeout`` once ``deadline`` passes.
    """
    data = b""
    while len(data) < total:
        left = remaining(deadline)
        if left <= 0:
            raise socket.timeout("deadline exceeded")
        sock.settimeout(left)
        chunk = sock.recv(total - len(data))
        if not chunk:
            break
        data += chunk
    return data


def parse_address(address):
    """Split ``host:port``, ``[v6]:port`` or a ``(host, port)`` pair."""
    if isinstance(address, (tuple, list)):
        host, port = address
        return str(host), int(port)
    text = str(address).strip()
    if text.startswith("["):
        host, sep, port = text[1:].partition("]:")
    else:
        host, sep, port = text.rpartition(":")
    if not sep or not host or not port:
        raise ValueError(f"address must be host:port, got {address!r}")
    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {address!r}") from None


def format_address(host, port):
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
