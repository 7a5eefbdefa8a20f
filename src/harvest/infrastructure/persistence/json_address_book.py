"""JSON-file-backed implementation of AddressBook."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from harvest.domain.model.order import DeliveryAddress
from harvest.domain.repository.address_book import AddressBook

log = logging.getLogger(__name__)


class JsonAddressBook(AddressBook):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    def load(self) -> DeliveryAddress | None:
        if not self._file_path.exists():
            return None
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
            return DeliveryAddress(
                province=str(raw.get("province", "")),
                city=str(raw.get("city", "")),
                street=str(raw.get("street", "")),
                phone=str(raw.get("phone", "")),
            )
        except (OSError, ValueError, AttributeError) as exc:
            log.warning("Ignoring unreadable saved address %s: %s", self._file_path, exc)
            return None

    def save(self, address: DeliveryAddress) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_path.write_text(
            json.dumps(address.to_payload(), indent=2) + "\n", encoding="utf-8"
        )
