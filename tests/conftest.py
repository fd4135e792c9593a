import contextlib
import io
import json
import ok_logging_setup
import os
import pty
import subprocess
import typing

import pytest

from trigger_port import _config
from trigger_port import _listing

ok_logging_setup.install(
    {
        "OK_LOGGING_LEVEL": "trigger_port=DEBUG,WARNING",
        "OK_LOGGING_OUTPUT": "stdout",
    }
)


class PseudoTtySerial(typing.NamedTuple):
    path: str
    control: io.FileIO
    simulated: io.FileIO


class FakeCommands(typing.NamedTuple):
    outputs: dict[str, tuple[int, str]]
    calls: list[str]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv(_config.CONFIG_DIR_ENV, str(config_dir))
    monkeypatch.delenv(_listing.SCAN_OVERRIDE_ENV, raising=False)
    return config_dir


@pytest.fixture
def pty_serial():
    with contextlib.ExitStack() as cleanup:
        ctrl_fd, sim_fd = pty.openpty()
        path = os.ttyname(sim_fd)
        ctrl = cleanup.enter_context(os.fdopen(ctrl_fd, "r+b", buffering=0))
        sim = cleanup.enter_context(os.fdopen(sim_fd, "r+b", buffering=0))
        yield PseudoTtySerial(path=path, control=ctrl, simulated=sim)


@pytest.fixture
def fake_commands(mocker):
    """Replaces shell commands; unknown commands exit with status 2"""

    fake = FakeCommands(outputs={}, calls=[])

    def run(command, **kwargs):
        fake.calls.append(command)
        status, stdout = fake.outputs.get(command, (2, ""))
        return subprocess.CompletedProcess(command, status, stdout, "")

    mocker.patch("subprocess.run", side_effect=run)
    return fake


@pytest.fixture
def set_scan_override(monkeypatch, tmp_path):
    path = tmp_path / "scan.json"
    path.write_text("{}")
    monkeypatch.setenv(_listing.SCAN_OVERRIDE_ENV, str(path))

    def set_ports(ports: dict[str, str]):
        path.write_text(json.dumps(ports))

    return set_ports
