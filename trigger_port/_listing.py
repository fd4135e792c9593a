import functools
import logging
import os
import pathlib
import subprocess

import msgspec

from trigger_port import _platforms
from trigger_port import _verbosity

log = logging.getLogger("trigger_port.listing")

SCAN_OVERRIDE_ENV = "TRIGGER_PORT_SCAN_OVERRIDE"


def list_ports(
    verbosity: _verbosity.Verbosity = 1,
    platform: _platforms.Platform | None = None,
) -> list[_platforms.PortEntry]:
    """
    Returns (identifier, port name) entries for USB serial devices found on
    the current system. Failing OS queries are logged according to
    'verbosity' and give an empty or partial list; this never raises for
    them.
    """

    report = _verbosity.Reporter(verbosity, log)
    if ov := os.getenv(SCAN_OVERRIDE_ENV):
        return _read_override(pathlib.Path(ov), report)

    platform = platform or _platforms.detect_platform()
    run = functools.partial(_run_command, report=report)
    out = platform.scan(run, report)
    log.debug("Found %d ports (%s)", len(out), platform.name)
    return out


def _run_command(
    command: str, report: _verbosity.Reporter
) -> _platforms.CommandResult:
    report(3, "$ %s", command)
    try:
        proc = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as ex:
        report(1, "Can't run %r (%s)", command, ex)
        return _platforms.CommandResult(status=-1, output="")

    if proc.stdout.strip():
        report(3, "%s", proc.stdout.rstrip())
    return _platforms.CommandResult(status=proc.returncode, output=proc.stdout)


def _read_override(
    path: pathlib.Path, report: _verbosity.Reporter
) -> list[_platforms.PortEntry]:
    try:
        data = msgspec.json.decode(path.read_bytes(), type=dict[str, str])
    except (OSError, msgspec.DecodeError) as ex:
        report(1, "Can't read $%s %s (%s)", SCAN_OVERRIDE_ENV, path, ex)
        return []

    out = [
        _platforms.PortEntry(identifier=ident, port_name=name)
        for name, ident in data.items()
    ]
    log.debug("$%s (%s): %d ports", SCAN_OVERRIDE_ENV, path, len(out))
    return out
