"""Tests for the JSON-file-backed record of applied payment transactions."""

import json

import pytest

from harvest.domain.exceptions import CorruptLedgerError
from harvest.infrastructure.persistence.json_transaction_ledger import JsonTransactionLedger


@pytest.fixture
def ledger_file(tmp_path):
    return tmp_path / "data" / "transactions.json"


def test_missing_file_contains_nothing(ledger_file):
    assert not JsonTransactionLedger(ledger_file).contains("t-1")


def test_recorded_transactions_survive_a_new_instance(ledger_file):
    JsonTransactionLedger(ledger_file).record("t-1")
    JsonTransactionLedger(ledger_file).record("t-2")

    ledger = JsonTransactionLedger(ledger_file)
    assert ledger.contains("t-1") and ledger.contains("t-2")
    assert not ledger.contains("t-3")


def test_recording_twice_stores_once(ledger_file):
    ledger = JsonTransactionLedger(ledger_file)
    ledger.record("t-1")
    ledger.record("t-1")
    raw = json.loads(ledger_file.read_text(encoding="utf-8"))
    assert raw == {"transactions": ["t-1"]}


@pytest.mark.parametrize("content", ["{not json", "[]", '{"other": []}'])
def test_unreadable_file_raises(ledger_file, content):
    ledger_file.parent.mkdir(parents=True)
    ledger_file.write_text(content, encoding="utf-8")
    with pytest.raises(CorruptLedgerError):
        JsonTransactionLedger(ledger_file).contains("t-1")
