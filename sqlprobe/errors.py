# MIT License
# Copyright (c) 2026 Franz Granlund
# See LICENSE file in the project root for full license information.

"""Failure categories reported by the probe.

Callers branch on ``ProbeError.kind`` (and ``reason`` for decode failures)
rather than on message text.
"""

from __future__ import annotations

import enum


class ErrorKind(enum.Enum):
    CONNECT_FAILED = "connect failed"
    CONNECT_TIMEOUT = "connect timeout"
    READ_TIMEOUT = "read timeout"
    READ_FAILED = "read failed"
    SEQUENCE_ERROR = "unexpected sequence number"
    DECODE_ERROR = "decode error"


class DecodeReason(enum.Enum):
    TRUNCATED_PREFIX = "truncated prefix"
    UNTERMINATED_VERSION_STRING = "unterminated version string"
    TRUNCATED_EXTENDED_FIELDS = "truncated extended fields"
    UNSUPPORTED_PROTOCOL_VERSION = "unsupported protocol version"


TIMEOUT_KINDS = frozenset({ErrorKind.CONNECT_TIMEOUT, ErrorKind.READ_TIMEOUT})


class ProbeError(Exception):
    def __init__(self, kind, message, reason=None, address=None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.reason = reason
        self.address = address

    @property
    def is_timeout(self):
        return self.kind in TIMEOUT_KINDS

    def __str__(self):
        text = f"{self.kind.value}: {self.message}"
        if self.address:
            return f"{self.address}: {text}"
        return text


class DecodeError(ProbeError):
    def __init__(self, reason, message):
        super().__init__(ErrorKind.DECODE_ERROR, message, reason=reason)
