import logging
import os
import pathlib

from trigger_port import _exceptions
from trigger_port import _listing
from trigger_port import _platforms
from trigger_port import _verbosity

log = logging.getLogger("trigger_port.config")

CONFIG_DIR_ENV = "TRIGGER_PORT_CONFIG_DIR"


def default_config_dir() -> pathlib.Path:
    """$TRIGGER_PORT_CONFIG_DIR, else ~/Documents/TriggerPort"""

    if ov := os.getenv(CONFIG_DIR_ENV):
        return pathlib.Path(ov)
    return pathlib.Path.home() / "Documents" / "TriggerPort"


def find_port_name(
    port_file: pathlib.Path | None = None,
    *,
    platform: _platforms.Platform,
    config_dir: pathlib.Path | None = None,
    verbosity: _verbosity.Verbosity = 1,
) -> str:
    """
    Picks the serial port for the trigger box: from 'port_file' if given,
    else from the platform's config files in 'config_dir', else the first
    discovered device, else the platform default.
    """

    report = _verbosity.Reporter(verbosity, log)
    if port_file:
        candidates = [port_file]
    else:
        config_dir = config_dir or default_config_dir()
        candidates = [config_dir / name for name in platform.config_files]

    for path in candidates:
        if name := _read_port_file(path, platform, report):
            report(2, "Using port %s from %s", name, path)
            return name

    if ports := _listing.list_ports(verbosity, platform=platform):
        report(2, "Using first device %s", ports[0].port_name)
        return ports[0].port_name

    if platform.default_port:
        report(1, "No devices found, trying %s", platform.default_port)
        return platform.default_port

    raise _exceptions.SerialOpenException("No serial devices found")


def _read_port_file(
    path: pathlib.Path,
    platform: _platforms.Platform,
    report: _verbosity.Reporter,
) -> str | None:
    try:
        text = path.read_text().strip()
    except FileNotFoundError:
        log.debug("No config file %s", path)
        return None
    except OSError as ex:
        raise _exceptions.SerialConfigInvalid(f"Can't read {path}") from ex

    if not text:
        report(1, "%s is empty, ignoring", path)
        return None
    if not (name := platform.port_from_text(text)):
        message = "%s: %r is not a %s port, ignoring"
        report(1, message, path, text, platform.name)
        return None
    return name
