"""Notice serialization."""

from .writer import OutputError, dump_notices, load_notices, write_notices

__all__ = [
    "OutputError",
    "dump_notices",
    "load_notices",
    "write_notices",
]
