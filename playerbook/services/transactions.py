"""
Transaction scope shared by the academy and player stores.

``run_in_transaction(callback)`` calls ``callback(txn)`` with a ``Transaction``
and returns its result. Store writes made with that ``txn`` become visible
together or not at all:

* ``native`` mode opens a MongoDB session transaction. The server discards
  every write on abort. Needs a replica set or mongos.
* ``compensating`` mode runs the writes directly and records an undo action
  for each one through ``txn.on_rollback``. If the callback raises, the undo
  actions run newest first and the error is re-raised. Calls that share a
  ``lock_key`` are serialized so no other writer sees the intermediate state
  through the same coordinator.

Neither mode retries. Errors propagate to the caller.
"""

import logging
import threading
from contextlib import nullcontext

from flask import current_app

from playerbook.extensions import mongo

logger = logging.getLogger(__name__)

NATIVE = 'native'
COMPENSATING = 'compensating'

# Fixed pool of striped locks; academies that hash to the same stripe share a lock
LOCK_STRIPES = 64
_locks = [threading.Lock() for _ in range(LOCK_STRIPES)]


class Transaction:
    """Handle passed to store writes made inside a transaction scope"""

    def __init__(self, session=None, compensating=False):
        self.session = session
        self.compensating = compensating
        self._undo = []

    def session_kwargs(self):
        """Keyword arguments to forward to pymongo collection calls"""
        return {'session': self.session} if self.session is not None else {}

    def on_rollback(self, action):
        """Register an undo action; the server handles rollback in native mode"""
        if self.compensating:
            self._undo.append(action)

    def rollback(self):
        while self._undo:
            action = self._undo.pop()
            try:
                action()
            except Exception as e:
                logger.error(f"Compensating action failed during rollback: {str(e)}")


def session_kwargs(txn):
    """Session kwargs for an optional transaction"""
    return txn.session_kwargs() if txn is not None else {}


def _lock_for(key):
    return _locks[hash(key) % LOCK_STRIPES]


def get_transaction_mode():
    return current_app.config.get('MONGO_TRANSACTION_MODE', NATIVE)


def run_in_transaction(callback, lock_key=None):
    """Run callback(txn) so that its store writes commit atomically"""
    mode = get_transaction_mode()
    if mode == COMPENSATING:
        return _run_compensating(callback, lock_key)
    if mode != NATIVE:
        raise ValueError(f"Unknown MONGO_TRANSACTION_MODE: {mode}")
    return _run_native(callback)


def _run_native(callback):
    with mongo.cx.start_session() as session:
        # start_transaction commits on clean exit and aborts if the block raises
        with session.start_transaction():
            return callback(Transaction(session=session))


def _run_compensating(callback, lock_key):
    lock = _lock_for(str(lock_key)) if lock_key is not None else nullcontext()
    with lock:
        txn = Transaction(compensating=True)
        try:
            return callback(txn)
        except Exception:
            logger.warning("Transaction callback failed, running compensating actions")
            txn.rollback()
            raise
