# MIT License
# Copyright (c) 2026 Franz Granlund
# See LICENSE file in the project root for full license information.

"""MySQL/TiDB handshake check.

Config keys:
- host (str, required)
- port (int, required)
- timeout (float, optional, seconds for connect + read, default 5)
- expect_protocol_version (int, optional, default 10; null accepts any)
- expect_server_version (str, optional; substring or regex)
- expect_server_version_regex (bool, optional, default False)
- expect_auth_plugin (str, optional; exact plugin name)
- expect_capabilities (list[str], optional; e.g. ["protocol_41", "ssl"])

Example:
cfg = {
    "host": "127.0.0.1",
    "port": 4000,
    "expect_server_version": "TiDB",
    "expect_capabilities": ["protocol_41"],
}
"""

from .client import probe
from .constants import CAPABILITIES, DEFAULT_TIMEOUT, PROTOCOL_VERSION
from .util import format_address, matches_expect


def check_mysql(cfg):
    host = cfg.get("host")
    port = int(cfg.get("port", 0))
    timeout = float(cfg.get("timeout", DEFAULT_TIMEOUT))
    expect_protocol = cfg.get("expect_protocol_version", PROTOCOL_VERSION)
    if expect_protocol is not None:
        expect_protocol = int(expect_protocol)
    expect_server_version = cfg.get("expect_server_version")
    expect_server_version_regex = bool(cfg.get("expect_server_version_regex", False))
    expect_auth_plugin = cfg.get("expect_auth_plugin")
    expect_capabilities = cfg.get("expect_capabilities") or []
    if not host or not port:
        return False, "mysql requires host and port"
    unknown = [name for name in expect_capabilities if name not in CAPABILITIES]
    if unknown:
        return False, f"mysql unknown capabilities: {', '.join(unknown)}"

    packet, err = probe(format_address(host, port), timeout, expect_protocol)
    if err is not None:
        return False, f"mysql failed: {err}"

    if not matches_expect(
        packet.server_version, expect_server_version, expect_server_version_regex
    ):
        return False, "mysql server version mismatch"
    if expect_auth_plugin is not None and packet.auth_plugin_name != expect_auth_plugin:
        return False, f"mysql auth plugin {packet.auth_plugin_name} != {expect_auth_plugin}"
    missing = [name for name in expect_capabilities if not packet.has_capability(name)]
    if missing:
        return False, f"mysql missing capabilities: {', '.join(missing)}"
    return (
        True,
        f"mysql handshake ok: {packet.server_version} (connection {packet.connection_id})",
    )
