from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from skuhub.utils.logging import get_logger

log = get_logger("skuhub.tx", "TX")


@contextmanager
def smart_transaction(session: Session) -> Iterator[Session]:
    """
    Run one unit of work on `session`.

    At the top level this is BEGIN ... COMMIT (BEGIN IMMEDIATE on SQLite, see
    skuhub.db). Inside a caller's transaction it is a SAVEPOINT: a failure
    rolls back only this block and the caller's work commits or rolls back
    with the outer transaction. Services wrap their reads too, so a read never
    leaves a transaction (and on SQLite, the write lock) open behind it.

        with smart_transaction(db):
            ... DB work ...
    """
    nested = session.in_transaction()
    cm = session.begin_nested() if nested else session.begin()
    try:
        with cm:
            yield session
    except Exception as e:
        log.debug("%s rolled back: %s", "savepoint" if nested else "transaction", e)
        raise
