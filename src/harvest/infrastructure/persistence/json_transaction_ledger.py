"""JSON-file-backed implementation of TransactionLedger.

The file holds ``{"transactions": [uuid, ...]}`` in the order they were
applied. An unreadable file is treated as a hard error: guessing "empty"
would let a replayed payment response clear the cart again.
"""

from __future__ import annotations

import json
from pathlib import Path

from harvest.domain.exceptions import CorruptLedgerError
from harvest.domain.repository.transaction_ledger import TransactionLedger

STORAGE_KEY = "transactions"


class JsonTransactionLedger(TransactionLedger):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    # --- TransactionLedger interface ------------------------------------------

    def contains(self, transaction_uuid: str) -> bool:
        return transaction_uuid in self._load()

    def record(self, transaction_uuid: str) -> None:
        recorded = self._load()
        if transaction_uuid in recorded:
            return
        recorded.append(transaction_uuid)
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_path.write_text(
            json.dumps({STORAGE_KEY: recorded}, indent=2) + "\n", encoding="utf-8"
        )

    # --- Internal helpers -----------------------------------------------------

    def _load(self) -> list[str]:
        if not self._file_path.exists():
            return []
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
            return [str(uuid) for uuid in raw[STORAGE_KEY]]
        except (OSError, UnicodeDecodeError, ValueError, KeyError, TypeError) as exc:
            raise CorruptLedgerError(f"Cannot read {self._file_path}: {exc}") from exc
