from typing import Callable

from sqlalchemy import event
from sqlalchemy.orm import Session, SessionTransaction

from skuhub.utils import background

_PENDING_KEY = "skuhub_after_commit"


def defer_until_commit(session: Session, fn: Callable, *args):
    """
    Queue `fn(*args)` on the session; it is dispatched in the background once
    the session's outermost transaction commits and dropped if it rolls back.
    """
    session.info.setdefault(_PENDING_KEY, []).append((fn, args))


@event.listens_for(Session, "after_commit")
def _dispatch_pending(session: Session):
    pending = session.info.pop(_PENDING_KEY, [])
    for fn, args in pending:
        background.submit(fn, *args)


@event.listens_for(Session, "after_transaction_end")
def _drop_pending(session: Session, transaction: SessionTransaction):
    # after_commit has already drained the queue when the outermost transaction committed
    if transaction.parent is None:
        session.info.pop(_PENDING_KEY, None)
