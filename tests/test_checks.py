# MIT License
# Copyright (c) 2026 Franz Granlund
# See LICENSE file in the project root for full license information.

import os
import shlex
import sys

import pytest
import yaml

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import main
from samples import MYSQL_8_0_19, TIDB_5_7_25
from servers import get_free_port, greeting_handler, serving

from sqlprobe.check import check_mysql


def _cfg(address, **extra):
    host, port = address.rsplit(":", 1)
    cfg = {"host": host, "port": int(port), "timeout": 2}
    cfg.update(extra)
    return cfg


def test_mysql_handshake_expectation():
    with serving(greeting_handler(MYSQL_8_0_19)) as address:
        ok, msg = check_mysql(
            _cfg(
                address,
                expect_server_version="8.0",
                expect_auth_plugin="caching_sha2_password",
                expect_capabilities=["protocol_41", "plugin_auth"],
            )
        )
    assert ok, msg
    assert "8.0.19" in msg


def test_tidb_server_version_regex():
    with serving(greeting_handler(TIDB_5_7_25)) as address:
        ok, msg = check_mysql(
            _cfg(
                address,
                expect_server_version=r"-TiDB-v4\.\d+",
                expect_server_version_regex=True,
            )
        )
    assert ok, msg


@pytest.mark.parametrize(
    "extra, fragment",
    [
        ({"expect_server_version": "8.0"}, "server version mismatch"),
        ({"expect_auth_plugin": "caching_sha2_password"}, "auth plugin"),
        ({"expect_capabilities": ["ssl"]}, "missing capabilities: ssl"),
        ({"expect_capabilities": ["telepathy"]}, "unknown capabilities: telepathy"),
    ],
)
def test_mysql_expectation_mismatch(extra, fragment):
    with serving(greeting_handler(TIDB_5_7_25)) as address:
        ok, msg = check_mysql(_cfg(address, **extra))
    assert not ok
    assert fragment in msg


def test_mysql_requires_host_and_port():
    ok, msg = check_mysql({"host": "127.0.0.1"})
    assert not ok
    assert msg == "mysql requires host and port"


def test_mysql_connect_failure():
    ok, msg = check_mysql({"host": "127.0.0.1", "port": get_free_port(), "timeout": 2})
    assert not ok
    assert "connect failed" in msg


def test_run_checks_prints_status(capsys):
    with serving(greeting_handler(TIDB_5_7_25)) as address:
        rc = main.run_checks({"checks": [dict(_cfg(address), name="tidb", type="tidb")]})
    assert rc == 0
    assert "[ok] tidb: mysql handshake ok" in capsys.readouterr().out


def test_unknown_type_fails(capsys):
    rc = main.run_checks({"checks": [{"name": "pg", "type": "postgres"}]})
    assert rc == 1
    assert "unknown type: postgres" in capsys.readouterr().out


def test_checks_must_be_a_list(capsys):
    assert main.run_checks({"checks": {"name": "x"}}) == 1
    assert "checks must be a list" in capsys.readouterr().out


def test_fail_command_runs_on_failure(tmp_path):
    marker = tmp_path / "failed.txt"
    cmd = shlex.join(
        [sys.executable, "-c", f"open(r'{marker}', 'w').write('x')"]
    )
    config = {
        "checks": [
            {
                "name": "missing-host",
                "type": "mysql",
                "fail_command": cmd,
            }
        ]
    }
    rc = main.run_checks(config)
    assert rc == 1
    assert marker.exists()


def test_check_command_runs_on_success(tmp_path):
    marker = tmp_path / "ok.txt"
    cmd = shlex.join(
        [sys.executable, "-c", f"open(r'{marker}', 'w').write('x')"]
    )
    with serving(greeting_handler(TIDB_5_7_25)) as address:
        check = dict(_cfg(address), name="tidb", type="mysql", command=cmd)
        rc = main.run_checks({"checks": [check]})
    assert rc == 0
    assert marker.exists()


def test_global_command_runs_on_success(tmp_path):
    marker = tmp_path / "ok.txt"
    cmd = shlex.join(
        [sys.executable, "-c", f"open(r'{marker}', 'w').write('x')"]
    )
    ok_config = {
        "command": cmd,
        "checks": [],
    }
    rc = main.run_checks(ok_config)
    assert rc == 0
    assert marker.exists()


def test_global_fail_command_runs_on_failure(tmp_path):
    marker = tmp_path / "fail.txt"
    cmd = shlex.join(
        [sys.executable, "-c", f"open(r'{marker}', 'w').write('x')"]
    )
    config = {
        "fail_command": cmd,
        "checks": [
            {
                "name": "missing-host",
                "type": "mysql",
            }
        ],
    }
    rc = main.run_checks(config)
    assert rc == 1
    assert marker.exists()


def test_main_reads_yaml_config(tmp_path, capsys):
    with serving(greeting_handler(MYSQL_8_0_19)) as address:
        config = {"checks": [dict(_cfg(address), name="primary", type="mysql")]}
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(config), encoding="utf-8")
        rc = main.main(["-c", str(path)])
    assert rc == 0
    assert "[ok] primary" in capsys.readouterr().out


def test_main_missing_config(tmp_path, capsys):
    rc = main.main(["-c", str(tmp_path / "nope.yaml")])
    assert rc == 1
    assert "failed to read config" in capsys.readouterr().out


def test_main_invalid_yaml(tmp_path, capsys):
    path = tmp_path / "config.yaml"
    path.write_text("checks: [unclosed", encoding="utf-8")
    rc = main.main(["-c", str(path)])
    assert rc == 1
    assert "invalid yaml" in capsys.readouterr().out


def test_main_probes_addresses(capsys):
    closed = f"127.0.0.1:{get_free_port()}"
    with serving(greeting_handler(TIDB_5_7_25)) as address:
        rc = main.main(["-a", address, "-a", closed, "-t", "2"])
    out = capsys.readouterr().out
    assert rc == 1
    assert f"[ok] {address}: 5.7.25-TiDB" in out
    assert "connection=157" in out
    assert "auth_plugin=mysql_native_password" in out
    assert f"[fail] {closed}" in out
