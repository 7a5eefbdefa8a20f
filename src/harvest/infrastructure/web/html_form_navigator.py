"""Navigator for a terminal session.

A terminal cannot post a form, so the payment redirect is written out as
a self-submitting HTML page and opened in the default browser. The
"visible URL" is whatever the last replace left behind.
"""

from __future__ import annotations

import html
import logging
from pathlib import Path
from typing import Mapping

import click

from harvest.domain.gateway.navigator import Navigator

log = logging.getLogger(__name__)

_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Redirecting to payment</title></head>
<body onload="document.forms[0].submit()">
<form method="POST" action="{action}">
{inputs}
<noscript><button type="submit">Continue to payment</button></noscript>
</form>
</body>
</html>
"""


class HtmlFormNavigator(Navigator):

    def __init__(self, output_path: Path, launch: bool = True) -> None:
        self._output_path = output_path
        self._launch = launch
        self.current_url: str | None = None

    def submit_form(self, action_url: str, fields: Mapping[str, str]) -> None:
        page = render_form_page(action_url, fields)
        self._output_path.parent.mkdir(parents=True, exist_ok=True)
        self._output_path.write_text(page, encoding="utf-8")
        log.info("Payment redirect page written to %s", self._output_path)
        if self._launch:
            click.launch(str(self._output_path))

    def replace_url(self, url: str) -> None:
        self.current_url = url
        log.debug("Visible URL replaced with %s", url)


def render_form_page(action_url: str, fields: Mapping[str, str]) -> str:
    inputs = "\n".join(
        f'<input type="hidden" name="{html.escape(name)}" value="{html.escape(value)}">'
        for name, value in fields.items()
    )
    return _PAGE.format(action=html.escape(action_url), inputs=inputs)
