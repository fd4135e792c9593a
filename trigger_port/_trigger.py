import contextlib
import logging
import pathlib

import pydantic
import serial

from trigger_port import _config
from trigger_port import _exceptions
from trigger_port import _platforms
from trigger_port import _verbosity

log = logging.getLogger("trigger_port.trigger")
data_log = logging.getLogger(log.name + ".data")


class TriggerOptions(pydantic.BaseModel):
    baud: int = 9600  # required by NeuroSpec trigger boxes
    config_dir: pathlib.Path | None = None
    verbosity: _verbosity.Verbosity = 1


class TriggerPort(contextlib.AbstractContextManager):
    """
    Serial connection to a trigger box. The port comes from 'port_file' (or
    the standard config files), falling back to the first discovered
    device. Use as a context manager so the port is closed on scope exit.
    """

    @pydantic.validate_call(
        config=pydantic.ConfigDict(arbitrary_types_allowed=True)
    )
    def __init__(
        self,
        port_file: pathlib.Path | None = None,
        opts: TriggerOptions = TriggerOptions(),
        platform: _platforms.Platform | None = None,
    ):
        port = _config.find_port_name(
            port_file,
            platform=platform or _platforms.detect_platform(),
            config_dir=opts.config_dir,
            verbosity=opts.verbosity,
        )

        with contextlib.ExitStack() as cleanup:
            log.debug("Opening %s (%s)", port, opts)
            try:
                self._serial = cleanup.enter_context(
                    serial.Serial(port=port, baudrate=opts.baud)
                )
            except OSError as ex:
                message = "Trigger port open error"
                raise _exceptions.SerialOpenException(message, port) from ex

            self._cleanup = cleanup.pop_all()

    def __del__(self) -> None:
        if hasattr(self, "_cleanup"):
            self._cleanup.close()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self._cleanup.__exit__(exc_type, exc_value, traceback)
        log.debug("Closed %s", self.port_name)

    def __repr__(self) -> str:
        return f"TriggerPort({self.port_name!r})"

    @property
    def port_name(self) -> str:
        return self._serial.port

    @pydantic.validate_call
    def close(self) -> None:
        self._cleanup.close()

    @pydantic.validate_call
    def is_closed(self) -> bool:
        return not self._serial.is_open

    @pydantic.validate_call
    def write(self, data: bytes) -> None:
        if not self._serial.is_open:
            message = "Trigger port was closed"
            raise _exceptions.SerialIoClosed(message, self.port_name)

        try:
            self._serial.write(data)
        except OSError as ex:
            message = "Trigger port write error"
            port = self.port_name
            raise _exceptions.SerialIoException(message, port) from ex

        data_log.debug("Wrote %db to %s", len(data), self.port_name)
