"""Display preferences persisted next to the notes."""

import json

from typehere.core.config import NARROW_KEY, THEME_KEY, VIM_KEY
from typehere.core.persistence import KeyValueStore, PersistentValue
from typehere.core.types import Preferences, Theme


def _decode_theme(raw: str) -> Theme:
    return Theme(json.loads(raw))


class PreferencesStore:
    """Theme, vim mode and narrow layout flags."""

    def __init__(self, kv: KeyValueStore):
        self._theme: PersistentValue[Theme] = PersistentValue(
            kv,
            THEME_KEY,
            Theme.LIGHT,
            encode=lambda theme: json.dumps(theme.value),
            decode=_decode_theme,
        )
        self._vim: PersistentValue[bool] = PersistentValue(kv, VIM_KEY, False)
        self._narrow: PersistentValue[bool] = PersistentValue(kv, NARROW_KEY, False)

    def get(self) -> Preferences:
        return Preferences(
            theme=self._theme.value,
            use_vim=bool(self._vim.value),
            narrow=bool(self._narrow.value),
        )

    def set_theme(self, theme: Theme) -> Preferences:
        self._theme.set(theme)
        return self.get()

    def toggle_theme(self) -> Preferences:
        theme = Theme.DARK if self._theme.value is Theme.LIGHT else Theme.LIGHT
        return self.set_theme(theme)

    def toggle_vim(self) -> Preferences:
        self._vim.set(not self._vim.value)
        return self.get()

    def toggle_narrow(self) -> Preferences:
        self._narrow.set(not self._narrow.value)
        return self.get()
