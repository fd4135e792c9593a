import abc
import collections.abc
import re
import sys
import typing

import msgspec
import natsort

from trigger_port import _verbosity

# Width of "/dev/ttyUSB" and "/dev/ttyACM", the Linux device-class prefix.
# Device paths from other kernel naming schemes will not split correctly.
LINUX_CLASS_PREFIX_LEN = 11

_COM_RE = re.compile(r"(?P<name>COM(?P<num>\d+)):")
_COM_NAME_RE = re.compile(r"COM\d+")


class PortEntry(msgspec.Struct, frozen=True):
    """A serial device found on the system"""

    identifier: str
    port_name: str

    def __str__(self):
        return self.port_name


class ParsedName(msgspec.Struct, frozen=True, tag="parsed"):
    prefix: str
    identifier: str


class FallbackName(msgspec.Struct, frozen=True, tag="fallback"):
    identifier: str


DeviceName = ParsedName | FallbackName


class CommandResult(typing.NamedTuple):
    status: int
    output: str


RunCommand = collections.abc.Callable[[str], CommandResult]


class Platform(abc.ABC):
    """How one operating system names, lists and configures serial ports"""

    name: typing.ClassVar[str]
    config_files: typing.ClassVar[tuple[str, ...]]
    default_port: typing.ClassVar[str | None] = None

    @abc.abstractmethod
    def scan(
        self, run: RunCommand, report: _verbosity.Reporter
    ) -> list[PortEntry]:
        """Runs the listing command(s) and parses devices from the output"""

    @abc.abstractmethod
    def port_from_text(self, text: str) -> str | None:
        """Port name from trimmed config file contents, None if unusable"""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class WindowsPlatform(Platform):
    name = "windows"
    config_files = ("port.txt",)
    default_port = "COM3"

    def scan(self, run, report):
        result = run("mode")
        if result.status != 0:
            report(1, "Unable to get device list (error %d)", result.status)
            return []

        out = []
        for match in _COM_RE.finditer(result.output):
            entry = PortEntry(identifier=match["num"], port_name=match["name"])
            report(2, "Serial device at %s", entry.port_name)
            out.append(entry)

        # highest COM number first
        return natsort.natsorted(out, key=lambda e: e.identifier, reverse=True)

    def port_from_text(self, text):
        if text.isdigit():
            return f"COM{text}"
        return text if _COM_NAME_RE.fullmatch(text) else None


class _PosixPlatform(Platform):
    config_files = ("usbdev.txt", "port.txt")
    patterns: typing.ClassVar[tuple[str, str]]
    query_failure_level: typing.ClassVar[int]
    none_found_message: typing.ClassVar[str]

    def scan(self, run, report):
        results = [(p, run(f"ls {p}")) for p in self.patterns]
        for pattern, result in results:
            if result.status != 0:
                report(
                    self.query_failure_level,
                    "Unable to list %s (error %d)",
                    pattern,
                    result.status,
                )

        if all(result.status != 0 for _, result in results):
            report(1, self.none_found_message)
            return []

        out = []
        for _, result in results:
            if result.status != 0:
                continue
            for path in result.output.split():
                parsed = self.parse_device(path)
                entry = PortEntry(identifier=parsed.identifier, port_name=path)
                report(2, "Serial device %s at %s", entry.identifier, path)
                out.append(entry)
        return out

    def port_from_text(self, text):
        # a bare number is a Windows COM index, not a device path
        return None if text.isdigit() else text

    @staticmethod
    @abc.abstractmethod
    def parse_device(path: str) -> DeviceName:
        pass


class MacPlatform(_PosixPlatform):
    """
    USB serial adapters appear as /dev/tty.X (full RS-232 lines) and/or
    /dev/cu.X (RX/TX/GND only), e.g. /dev/tty.usbserial-A700elGZ or
    /dev/cu.usbmodem1234. Many devices show up under both names.
    """

    name = "macos"
    patterns = ("/dev/tty.usb*", "/dev/cu.usb*")
    query_failure_level = 2
    none_found_message = "No devices found"

    @staticmethod
    def parse_device(path: str) -> DeviceName:
        dot = path.rfind(".")
        suffix = path[dot + 1 :] if 0 <= dot < len(path) - 1 else path
        prefix, dash, identifier = suffix.rpartition("-")
        if dash and identifier:
            return ParsedName(prefix=prefix, identifier=identifier)
        return FallbackName(identifier=suffix)


class LinuxPlatform(_PosixPlatform):
    name = "linux"
    patterns = ("/dev/ttyUSB*", "/dev/ttyACM*")
    query_failure_level = 1
    none_found_message = "No USB or ACM devices found"

    @staticmethod
    def parse_device(path: str) -> DeviceName:
        parts = path.split("-")
        if len(parts) > 1:
            return ParsedName(prefix=parts[0], identifier=parts[1])
        return FallbackName(identifier=path[LINUX_CLASS_PREFIX_LEN:])


def detect_platform(system: str | None = None) -> Platform:
    """Picks the Platform variant for a sys.platform value (default: ours)"""

    system = system or sys.platform
    if system.startswith(("win", "cygwin")):
        return WindowsPlatform()
    if system == "darwin":
        return MacPlatform()
    return LinuxPlatform()
