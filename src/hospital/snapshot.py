"""
Whole-graph snapshot persistence.

Pickle keeps shared references intact, so a patient reachable from both its
ward and its team comes back as a single instance.
"""

from __future__ import annotations

import os
import pickle
import tempfile
from pathlib import Path
from typing import Type, TypeVar

from .exceptions import PersistenceError

T = TypeVar("T")


def write_snapshot(obj: object, path: Path) -> None:
    """Write ``obj`` to ``path``, replacing any previous snapshot in one step."""
    path = Path(path)
    directory = path.parent
    tmp_name = None
    try:
        directory.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "wb", dir=directory, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as fh:
            tmp_name = fh.name
            pickle.dump(obj, fh, protocol=pickle.HIGHEST_PROTOCOL)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except (OSError, pickle.PicklingError, TypeError, AttributeError) as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise PersistenceError(f"Problem storing snapshot to {path}: {exc}") from exc


def read_snapshot(path: Path, expected_type: Type[T]) -> T:
    """Load a snapshot written by :func:`write_snapshot`."""
    path = Path(path)
    if not path.exists():
        raise PersistenceError(f"Snapshot {path} does not exist")
    try:
        with path.open("rb") as fh:
            obj = pickle.load(fh)
    except OSError as exc:
        raise PersistenceError(f"Snapshot {path} could not be read: {exc}") from exc
    except Exception as exc:  # unpickling can raise almost anything on foreign bytes
        raise PersistenceError(
            f"Snapshot {path} is incompatible with this version of the software: {exc}"
        ) from exc
    if not isinstance(obj, expected_type):
        raise PersistenceError(
            f"Snapshot {path} is incompatible with this version of the software: "
            f"expected {expected_type.__name__}, found {type(obj).__name__}"
        )
    return obj
