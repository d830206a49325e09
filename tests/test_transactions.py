from unittest.mock import MagicMock

import pytest

from playerbook.extensions import mongo
from playerbook.services import transactions
from playerbook.services.transactions import Transaction, run_in_transaction


def test_compensating_rollback_runs_undo_actions_newest_first(app):
    undone = []

    def write(txn):
        txn.on_rollback(lambda: undone.append('first'))
        txn.on_rollback(lambda: undone.append('second'))
        raise RuntimeError('second write failed')

    with pytest.raises(RuntimeError):
        run_in_transaction(write, lock_key='academy-1')

    assert undone == ['second', 'first']


def test_compensating_commit_discards_undo_actions(app):
    undone = []

    def write(txn):
        txn.on_rollback(lambda: undone.append('insert'))
        return 'done'

    assert run_in_transaction(write) == 'done'
    assert undone == []


def test_failing_undo_action_does_not_stop_rollback(app):
    undone = []

    def broken():
        raise RuntimeError('undo failed')

    def write(txn):
        txn.on_rollback(lambda: undone.append('first'))
        txn.on_rollback(broken)
        raise ValueError('boom')

    with pytest.raises(ValueError):
        run_in_transaction(write)

    assert undone == ['first']


def test_native_mode_uses_a_session_transaction(app, monkeypatch):
    app.config['MONGO_TRANSACTION_MODE'] = 'native'
    client = MagicMock()
    monkeypatch.setattr(mongo, 'cx', client)
    session = client.start_session.return_value.__enter__.return_value

    seen = {}

    def write(txn):
        seen['kwargs'] = txn.session_kwargs()
        txn.on_rollback(lambda: seen.setdefault('undo', True))
        return 42

    assert run_in_transaction(write) == 42
    assert seen['kwargs'] == {'session': session}
    session.start_transaction.assert_called_once_with()
    session.start_transaction.return_value.__exit__.assert_called_once()
    assert 'undo' not in seen


def test_unknown_mode_is_rejected(app):
    app.config['MONGO_TRANSACTION_MODE'] = 'optimistic'

    with pytest.raises(ValueError):
        run_in_transaction(lambda txn: None)


def test_session_kwargs_without_session():
    assert transactions.session_kwargs(None) == {}
    assert Transaction().session_kwargs() == {}


def test_native_mode_passes_callback_errors_to_the_transaction(app, monkeypatch):
    app.config['MONGO_TRANSACTION_MODE'] = 'native'
    client = MagicMock()
    monkeypatch.setattr(mongo, 'cx', client)
    client.start_session.return_value.__exit__.return_value = False
    session = client.start_session.return_value.__enter__.return_value
    session.start_transaction.return_value.__exit__.return_value = False

    def write(txn):
        raise RuntimeError('insert failed')

    with pytest.raises(RuntimeError):
        run_in_transaction(write)

    exc_type = session.start_transaction.return_value.__exit__.call_args.args[0]
    assert exc_type is RuntimeError


def test_lock_pool_is_fixed_size():
    first = transactions._lock_for('academy-1')

    assert transactions._lock_for('academy-1') is first
    for n in range(1000):
        transactions._lock_for(f'academy-{n}')
    assert len(transactions._locks) == transactions.LOCK_STRIPES
