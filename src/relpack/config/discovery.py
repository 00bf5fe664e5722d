"""Locate the project's ``relpack.toml``.

``RELPACK_CONFIG`` names the file explicitly. Otherwise the search starts in
the given directory and climbs towards the filesystem root, taking the first
``relpack.toml`` it meets.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "relpack.toml"
CONFIG_ENV_VAR = "RELPACK_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Path of the governing ``relpack.toml`` for *start* (default: cwd), or None.

    An explicit ``RELPACK_CONFIG`` that does not point at a file yields None
    rather than falling back to the directory search.
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        path = Path(explicit)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
