# MIT License
# Copyright (c) 2026 Franz Granlund
# See LICENSE file in the project root for full license information.

PROTOCOL_VERSION = 10

DEFAULT_TIMEOUT = 5.0

HEADER_LEN = 4  # 3-byte little-endian payload length + 1-byte sequence

AUTH_PLUGIN_DATA_PART1_LEN = 8
MIN_AUTH_PLUGIN_DATA_PART2_LEN = 13
RESERVED_LEN = 10

# Server capability flags, lower and upper halves combined.
CAPABILITIES = {
    "long_password": 1 << 0,
    "found_rows": 1 << 1,
    "long_flag": 1 << 2,
    "connect_with_db": 1 << 3,
    "no_schema": 1 << 4,
    "compress": 1 << 5,
    "odbc": 1 << 6,
    "local_files": 1 << 7,
    "ignore_space": 1 << 8,
    "protocol_41": 1 << 9,
    "interactive": 1 << 10,
    "ssl": 1 << 11,
    "ignore_sigpipe": 1 << 12,
    "transactions": 1 << 13,
    "reserved": 1 << 14,
    "secure_connection": 1 << 15,
    "multi_statements": 1 << 16,
    "multi_results": 1 << 17,
    "ps_multi_results": 1 << 18,
    "plugin_auth": 1 << 19,
    "connect_attrs": 1 << 20,
    "plugin_auth_lenenc_client_data": 1 << 21,
    "can_handle_expired_passwords": 1 << 22,
    "session_track": 1 << 23,
    "deprecate_eof": 1 << 24,
    "optional_resultset_metadata": 1 << 25,
    "zstd_compression_algorithm": 1 << 26,
    "query_attributes": 1 << 27,
    "multi_factor_authentication": 1 << 28,
    "capability_extension": 1 << 29,
    "ssl_verify_server_cert": 1 << 30,
    "remember_options": 1 << 31,
}

CLIENT_PLUGIN_AUTH = CAPABILITIES["plugin_auth"]
