"""Open/closed tracking for the suggestion panel and its keyboard shortcut."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

ESCAPE_KEY_CODE = 27


class PanelStateTracker:
    """Authoritative ``is_open`` flag read by the keyboard shortcut.

    When bound to a panel, ``toggle_panel()`` asks the panel to change state;
    the panel reports back through ``sync()`` inside the same call, so the
    flag never lags behind the panel.
    """

    def __init__(self, set_panel_open: Callable[[bool], None] | None = None):
        self._is_open = False
        self._set_panel_open = set_panel_open

    @property
    def is_open(self) -> bool:
        return self._is_open

    def bind(self, set_panel_open: Callable[[bool], None]) -> None:
        self._set_panel_open = set_panel_open

    def sync(self, is_open: bool) -> None:
        """Mirror the panel's own state. Called from its state-change hook."""
        self._is_open = bool(is_open)

    def open(self) -> None:
        self._set(True)

    def close(self) -> None:
        self._set(False)

    def toggle_panel(self) -> bool:
        self._set(not self._is_open)
        return self._is_open

    def handle_escape(self) -> bool:
        """Close an open panel. Returns False when there was nothing to close."""
        if not self._is_open:
            return False
        self._set(False)
        return True

    def _set(self, value: bool) -> None:
        if self._set_panel_open is not None:
            self._set_panel_open(value)
        self._is_open = value


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """Keyboard event as reported by the host page."""

    key: str = ""
    key_code: int | None = None
    meta: bool = False
    ctrl: bool = False

    @property
    def is_escape(self) -> bool:
        return self.key_code == ESCAPE_KEY_CODE or self.key == "Escape"


class KeyboardShortcut:
    """Cmd/Ctrl+<key> toggles the panel, Escape closes it."""

    def __init__(
        self,
        tracker: PanelStateTracker,
        *,
        key: str = "k",
        on_toggle: Callable[[], None] | None = None,
    ):
        self.tracker = tracker
        self.key = key.lower()
        self._on_toggle = on_toggle

    def handle(self, event: KeyEvent) -> bool:
        """Handle a keydown. True means the host should prevent the default."""
        if event.is_escape:
            handled = self.tracker.handle_escape()
        elif event.key.lower() == self.key and (event.meta or event.ctrl):
            self.tracker.toggle_panel()
            handled = True
        else:
            return False

        if handled and self._on_toggle:
            self._on_toggle()
        return handled
