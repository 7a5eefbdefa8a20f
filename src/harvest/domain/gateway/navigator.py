"""Port to whatever hosts the checkout (a browser tab, a terminal).

The payment flow leaves the application with a cross-origin form post
and comes back through a return URL; both ends go through here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping


class Navigator(ABC):

    @abstractmethod
    def submit_form(self, action_url: str, fields: Mapping[str, str]) -> None:
        """Navigate away by posting *fields* to *action_url*."""

    @abstractmethod
    def replace_url(self, url: str) -> None:
        """Replace the visible URL without navigating."""
