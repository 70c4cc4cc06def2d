"""Generator-based log file reading and glob expansion."""

import glob
import os
from typing import Generator


def read_lines(filepath: str, encoding: str = "utf-8") -> Generator[str, None, None]:
    """Yield each line of a single file, trailing newline removed."""
    with open(filepath, "r", encoding=encoding) as f:
        for line in f:
            yield line.rstrip("\r\n")


def expand_paths(raw_paths: list[str]) -> list[str]:
    """Expand globs, deduplicate, and validate that files exist.

    Rotated logs sort naturally (``mail.log``, ``mail.log.1``) when passed as
    a glob like ``/var/log/mail.log*``.

    Raises FileNotFoundError if a non-glob path doesn't exist.
    Raises FileNotFoundError if expansion produces zero files.
    """
    expanded = []
    seen = set()

    for raw in raw_paths:
        if any(c in raw for c in ("*", "?", "[")):
            for m in sorted(glob.glob(raw)):
                if m not in seen and os.path.isfile(m):
                    seen.add(m)
                    expanded.append(m)
        else:
            if not os.path.isfile(raw):
                raise FileNotFoundError(f"File not found: {raw}")
            if raw not in seen:
                seen.add(raw)
                expanded.append(raw)

    if not expanded:
        raise FileNotFoundError("No log files found matching the given paths")

    return expanded
