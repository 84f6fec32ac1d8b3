"""Translate psycopg errors into domain errors at the adapter boundary."""

from collections.abc import Iterator
from contextlib import contextmanager

import psycopg
from psycopg import errors

from jsonstore.domain.exceptions import StorageError, Timeout, Unavailable


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise driver and pool errors as StorageError subclasses."""
    try:
        yield
    except errors.QueryCanceled as e:
        raise Timeout(f"{action}: query canceled") from e
    except psycopg.OperationalError as e:
        # PoolTimeout and PoolClosed are OperationalError subclasses too
        raise Unavailable(f"{action}: {e}") from e
    except psycopg.Error as e:
        raise StorageError(f"{action}: {e}") from e
