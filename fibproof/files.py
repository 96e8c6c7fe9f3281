# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import json
import os
import stat
import tempfile

from pathlib import Path
from typing import Any

from fibproof.errors import IoFailure


def _target_mode(path: Path) -> int:
    # replaced files keep their mode, new ones follow the umask
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def save_json(path: str | Path, data: Any) -> None:
    """
    Serialize data as pretty-printed JSON and atomically place it at `path`.

    The JSON is written with:
    - `indent=2` for readability
    - `sort_keys=True` for deterministic output

    The document is first written to a uniquely named temporary file in the
    destination directory, flushed and fsynced, then moved over `path` with
    `os.replace`. A reader (or a concurrent writer) therefore only ever sees
    the previous file or the complete new one.

    Args:
        path: Destination file path (string or `Path`).
        data: Any JSON-serializable Python object (dict/list/str/int/etc.).

    Returns:
        None.

    Side effects:
        - Creates `path.parent` directories if they do not exist.
        - Replaces the file if it already exists, keeping its permission bits.
        - A new file gets `0o666` less the umask.

    Raises:
        TypeError: If `data` contains non-JSON-serializable objects. Nothing
            is written in that case.
        IoFailure: If the file cannot be created, written or moved into place.
    """
    path = Path(path)
    # serialize first so a bad payload never touches the filesystem
    text = json.dumps(data, indent=2, sort_keys=True) + "\n"

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
    except OSError as err:
        raise IoFailure(f"cannot prepare {path}: {err}") from err

    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp, _target_mode(path))
        os.replace(tmp, path)
    except OSError as err:
        tmp.unlink(missing_ok=True)
        raise IoFailure(f"cannot write {path}: {err}") from err
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def load_json(path: str | Path) -> Any:
    """
    Load and parse a JSON file.

    Args:
        path: Path to the JSON file (string or `Path`).

    Returns:
        The parsed JSON value (commonly a dict or list), typed as `Any`.

    Raises:
        IoFailure: If the file cannot be opened or read.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except OSError as err:
        raise IoFailure(f"cannot read {path}: {err}", stage="read") from err
