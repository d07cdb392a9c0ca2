"""
Logging for fdtdsim.

All modules log through children of the ``fdtdsim`` logger, so one call
to ``set_level`` controls the whole package.  Besides the standard levels
there is ``STEP`` (just below DEBUG) for one line per time step, which is
far too chatty for ordinary debugging of a long run.

>>> from fdtdsim.core.logger import get_logger, set_level
>>> log = get_logger(__name__)
>>> set_level(4)                 # show per-step messages
>>> log.step("step %d done", 12)
"""

import logging

ROOT_NAME = "fdtdsim"

STEP = logging.DEBUG - 1
logging.addLevelName(STEP, "STEP")

# quiet, warnings, run summaries, setup details, every time step
VERBOSITY = (logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG, STEP)


class _FdtdLogger(logging.Logger):

    def step(self, msg, *args, **kwargs):
        """Log *msg* at the per-time-step level."""
        if self.isEnabledFor(STEP):
            self._log(STEP, msg, args, **kwargs)


def get_logger(name=None) -> _FdtdLogger:
    """Logger *name* (a module ``__name__``) under the ``fdtdsim`` tree.

    Names outside the package are attached below ``fdtdsim`` so that
    ``set_level`` still reaches them.
    """
    if not name:
        name = ROOT_NAME
    elif name != ROOT_NAME and not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"

    previous = logging.getLoggerClass()
    logging.setLoggerClass(_FdtdLogger)
    try:
        return logging.getLogger(name)
    finally:
        logging.setLoggerClass(previous)


def set_level(level=logging.INFO):
    """Set the threshold of every fdtdsim logger.

    Parameters
    ----------
    level : int or str
        A verbosity from 0 (errors only) to 4 (every time step), a
        ``logging`` level number, or a level name such as ``"STEP"``.
    """
    if isinstance(level, int) and 0 <= level < len(VERBOSITY):
        level = VERBOSITY[level]
    elif isinstance(level, str):
        number = logging.getLevelName(level.upper())
        if not isinstance(number, int):
            raise ValueError(f"unknown log level {level!r}")
        level = number
    logging.getLogger(ROOT_NAME).setLevel(level)
