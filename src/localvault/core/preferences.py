"""User preferences persisted through the TTL cache."""

from __future__ import annotations

from localvault.services.cache import TTLCache
from localvault.shared.constants import StorageKeys, TodoFilters
from localvault.shared.errors import DomainError, ErrorCode, ErrorContext

DEFAULT_THEME = "default"
DEFAULT_ANIM_SPEED = "normal"
DEFAULT_FONT_SIZE = "medium"


class Preferences:
    """Typed view over the preference keys."""

    def __init__(self, cache: TTLCache, key_prefix: str = StorageKeys.DEFAULT_PREFIX) -> None:
        self.cache = cache
        self.key_prefix = key_prefix

    def _key(self, suffix: str) -> str:
        return f"{self.key_prefix}{suffix}"

    @property
    def filter(self) -> str:
        value = self.cache.get(self._key(StorageKeys.FILTER))
        return value if value in TodoFilters.VALUES else TodoFilters.ALL

    @filter.setter
    def filter(self, value: str) -> None:
        if value not in TodoFilters.VALUES:
            raise DomainError(
                ErrorCode.VALIDATION_ERROR,
                f"Unknown filter '{value}'",
                ErrorContext(
                    key=self._key(StorageKeys.FILTER),
                    operation="set_filter",
                    additional_data={"allowed": ",".join(TodoFilters.VALUES)},
                ),
            )
        self.cache.set(self._key(StorageKeys.FILTER), value)

    @property
    def theme(self) -> str:
        return self.cache.get(self._key(StorageKeys.THEME)) or DEFAULT_THEME

    @theme.setter
    def theme(self, value: str) -> None:
        self.cache.set(self._key(StorageKeys.THEME), value)

    @property
    def dark_mode(self) -> bool:
        return self.cache.get_bool(self._key(StorageKeys.DARK_MODE), default=False)

    @dark_mode.setter
    def dark_mode(self, value: bool) -> None:
        self.cache.set_bool(self._key(StorageKeys.DARK_MODE), value)

    @property
    def anim_speed(self) -> str:
        return self.cache.get(self._key(StorageKeys.ANIM_SPEED)) or DEFAULT_ANIM_SPEED

    @anim_speed.setter
    def anim_speed(self, value: str) -> None:
        self.cache.set(self._key(StorageKeys.ANIM_SPEED), value)

    @property
    def font_size(self) -> str:
        return self.cache.get(self._key(StorageKeys.FONT_SIZE)) or DEFAULT_FONT_SIZE

    @font_size.setter
    def font_size(self, value: str) -> None:
        self.cache.set(self._key(StorageKeys.FONT_SIZE), value)
