"""Clipboard access over pyperclip."""

from __future__ import annotations

import logging

import pyperclip

from pasteline.errors import ClipboardAccessError

log = logging.getLogger("pasteline")


class ClipboardStore:
    """Read/write the OS clipboard. Failures raise ClipboardAccessError."""

    def read(self) -> str:
        try:
            text = pyperclip.paste()
        except Exception as e:
            raise ClipboardAccessError(f"Could not read the clipboard: {e}") from e
        return text or ""

    def write(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except Exception as e:
            raise ClipboardAccessError(f"Could not write the clipboard: {e}") from e
        log.debug(f"Clipboard set ({len(text)} chars)")
