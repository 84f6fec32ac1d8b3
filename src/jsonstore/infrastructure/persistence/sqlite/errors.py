"""Translate sqlite3 errors into domain errors at the adapter boundary."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from jsonstore.domain.exceptions import StorageError, Timeout, Unavailable


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise driver errors as StorageError subclasses."""
    try:
        yield
    except sqlite3.OperationalError as e:
        if "interrupted" in str(e):
            raise Timeout(f"{action}: statement interrupted") from e
        # locked/busy past busy_timeout, unreadable file, disk I/O
        raise Unavailable(f"{action}: {e}") from e
    except sqlite3.Error as e:
        raise StorageError(f"{action}: {e}") from e
