# MIT License
# Copyright (c) 2026 Franz Granlund
# See LICENSE file in the project root for full license information.

import argparse
import logging
import shlex
import subprocess
import sys

import yaml

from sqlprobe import probe
from sqlprobe.check import check_mysql
from sqlprobe.constants import DEFAULT_TIMEOUT

CHECKS = {
    "mysql": check_mysql,
    "tidb": check_mysql,
}


def run_command(command):
    if not command:
        return True
    try:
        args = shlex.split(command)
        result = subprocess.run(args, check=False)
        return result.returncode == 0
    except OSError:
        return False


def run_checks(config):
    checks = config.get("checks", [])
    if not isinstance(checks, list):
        print("config error: checks must be a list")
        return 1

    any_failed = False
    for item in checks:
        name = item.get("name", "(unnamed)")
        ctype = item.get("type")
        check = CHECKS.get(ctype)
        if check is None:
            ok, msg = False, f"unknown type: {ctype}"
        else:
            ok, msg = check(item)

        status = "ok" if ok else "fail"
        print(f"[{status}] {name}: {msg}")

        if ok:
            command = item.get("command")
            if command:
                cmd_ok = run_command(command)
                if not cmd_ok:
                    print(f"[fail] {name}: command failed")
                    any_failed = True
        else:
            fail_command = item.get("fail_command")
            if fail_command:
                cmd_ok = run_command(fail_command)
                if not cmd_ok:
                    print(f"[fail] {name}: fail command failed")
            any_failed = True

    if any_failed:
        fail_command = config.get("fail_command")
        if fail_command:
            cmd_ok = run_command(fail_command)
            if not cmd_ok:
                print("[fail] global fail_command failed")
        return 1

    command = config.get("command")
    if command:
        cmd_ok = run_command(command)
        if not cmd_ok:
            print("[fail] global command failed")
            return 1
    return 0


def probe_addresses(addresses, timeout):
    any_failed = False
    for address in addresses:
        packet, err = probe(address, timeout)
        if err is not None:
            print(f"[fail] {address}: {err}")
            any_failed = True
            continue
        print(
            f"[ok] {address}: {packet.server_version}"
            f" connection={packet.connection_id}"
            f" capabilities={packet.capability_flag:#010x}"
            f" auth_plugin={packet.auth_plugin_name or '-'}"
        )
    return 1 if any_failed else 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="MySQL/TiDB handshake probe")
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="path to config YAML (default: config.yaml)",
    )
    parser.add_argument(
        "-a",
        "--address",
        action="append",
        default=[],
        help="probe HOST:PORT directly instead of reading a config (repeatable)",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"seconds per probe with --address (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="logging level (default: WARNING)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.address:
        return probe_addresses(args.address, args.timeout)

    try:
        with open(args.config, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except OSError as exc:
        print(f"failed to read config: {exc}")
        return 1
    except yaml.YAMLError as exc:
        print(f"invalid yaml: {exc}")
        return 1

    return run_checks(config)


if __name__ == "__main__":
    sys.exit(main())
