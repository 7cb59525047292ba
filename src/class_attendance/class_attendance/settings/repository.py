from __future__ import annotations

from typing import Any, Optional, Protocol

from .model import AppSettings


class SettingsRepository(Protocol):
    def get(self) -> Optional[AppSettings]:
        raise NotImplementedError

    def update(self, **fields: Any) -> None:
        """Persist the given columns of the single settings row."""
        raise NotImplementedError

    def ping(self) -> bool:
        raise NotImplementedError
