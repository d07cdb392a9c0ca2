"""
Plain-text parameter files: one value per line, optional trailing comment.

A line holds a number followed by an optional comment introduced by
``!`` or ``:``::

    40                        : Number of cells along x.
    5.0E-09                   ! cell size (m)

Readers consume exactly one line per value, so a file is read by calling
them in the order the values were written.
"""

import re

_COMMENT = re.compile(r"[!:]")


def read_value(fh):
    """Read the next value from *fh* as a float.

    Raises
    ------
    ValueError
        At end of file, or when the line holds no value before its comment.
    """
    line = fh.readline()
    if not line:
        raise ValueError("Unexpected end of file while reading parameter")
    text = _COMMENT.split(line, maxsplit=1)[0].strip()
    if not text:
        raise ValueError(f"No value on parameter line: {line!r}")
    return float(text.split()[0])


def read_int(fh):
    """Read the next value from *fh*, which must be a whole number."""
    value = read_value(fh)
    if not value.is_integer():
        raise ValueError(f"Expected an integer parameter, got {value}")
    return int(value)


def write_value(fh, value, description):
    """Write one value line: integers as ``%25d``, floats as ``%25.14E``."""
    if isinstance(value, int):
        fh.write(f"{value:25d} : {description}\n")
    else:
        fh.write(f"{value:25.14E} : {description}\n")
