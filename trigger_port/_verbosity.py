import logging
import typing

Verbosity = typing.Literal[0, 1, 2, 3]

_LEVELS = {1: logging.WARNING, 2: logging.INFO, 3: logging.DEBUG}


class Reporter(typing.NamedTuple):
    """Logs user-facing messages only at or below the requested verbosity"""

    verbosity: int
    log: logging.Logger

    def __call__(self, level: int, message: str, *args) -> None:
        if 0 < level <= self.verbosity:
            self.log.log(_LEVELS[level], message, *args)
