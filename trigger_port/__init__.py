"""
USB serial port discovery for Windows, macOS and Linux, and a serial
connection to a NeuroSpec trigger box.
"""

from beartype.claw import beartype_this_package as _beartype_me

# ruff: noqa: E402
_beartype_me()

from trigger_port._config import find_port_name

from trigger_port._exceptions import (
    SerialConfigInvalid,
    SerialException,
    SerialIoClosed,
    SerialIoException,
    SerialOpenException,
)

from trigger_port._listing import list_ports
from trigger_port._platforms import (
    FallbackName,
    LinuxPlatform,
    MacPlatform,
    ParsedName,
    Platform,
    PortEntry,
    WindowsPlatform,
    detect_platform,
)
from trigger_port._trigger import TriggerOptions, TriggerPort

__all__ = [n for n in dir() if not n.startswith("_")]
