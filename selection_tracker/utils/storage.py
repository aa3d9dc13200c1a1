"""Versioned JSON envelopes for persisted tracker state.

Each blob is written as::

    {"kind": ..., "version": ..., "saved_at": ..., "data": {...}}

and read back only when kind and version match.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from selection_tracker.utils.atomic import atomic_write_text
from selection_tracker.utils.logging import get_logger
from selection_tracker.utils.result import Err, Ok, Result, StorageError

logger = get_logger("utils.storage")


def read_blob(path: Path, kind: str, version: str) -> Result[dict[str, Any], StorageError]:
    """
    Read the payload of a persisted blob.

    Args:
        path: Blob location
        kind: Expected envelope kind
        version: Expected state version

    Returns:
        Result with the ``data`` mapping or a StorageError
    """
    path = Path(path)
    if not path.exists():
        return Err(StorageError(path=str(path), message="not found"))

    try:
        envelope = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        return Err(StorageError(path=str(path), message="unreadable", cause=e))

    if not isinstance(envelope, dict):
        return Err(StorageError(path=str(path), message="envelope is not a mapping"))

    if envelope.get("kind") != kind:
        return Err(StorageError(
            path=str(path),
            message=f"expected kind '{kind}', found '{envelope.get('kind')}'",
        ))

    if str(envelope.get("version")) != str(version):
        return Err(StorageError(
            path=str(path),
            message=f"expected version {version}, found {envelope.get('version')}",
        ))

    data = envelope.get("data")
    if not isinstance(data, dict):
        return Err(StorageError(path=str(path), message="missing data section"))

    return Ok(data)


def write_blob(
    path: Path,
    kind: str,
    version: str,
    data: dict[str, Any],
    as_text: bool = True,
) -> None:
    """
    Atomically write a full-state blob.

    Args:
        path: Blob location
        kind: Envelope kind
        version: State version
        data: Payload
        as_text: Indented, diff-friendly output when True; compact otherwise
    """
    envelope = {
        "kind": kind,
        "version": version,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }
    if as_text:
        content = json.dumps(envelope, indent=2, default=str)
    else:
        content = json.dumps(envelope, separators=(",", ":"), default=str)

    atomic_write_text(Path(path), content)
    logger.debug("blob_saved", kind=kind, path=str(path))
