from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from swiftshop.errors import TransientStoreError


@contextmanager
def smart_transaction(session: Session) -> Iterator[Session]:
    """
    Run a unit of work in one transaction on the given Session.

    Starts a SAVEPOINT (begin_nested) when a transaction is already active,
    otherwise a normal transaction. Everything inside the block commits or
    rolls back together. Driver-level failures are re-raised as
    TransientStoreError; integrity violations propagate unchanged so callers
    can resolve unique-key races themselves.
    """
    if session.in_transaction():
        cm = session.begin_nested()
    else:
        cm = session.begin()
    try:
        with cm:
            yield session
    except IntegrityError:
        raise
    except DBAPIError as e:
        raise TransientStoreError("Storage unavailable, try again", cause=e) from e
