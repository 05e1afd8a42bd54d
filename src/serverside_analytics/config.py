"""Store configuration keys and a static, store-scoped config source."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol

from serverside_analytics.emulation import StoreEmulation

SCOPE_DEFAULT = "default"
SCOPE_STORE = "store"

XML_PATH_ENABLED = "google/serverside_analytics/general/enable"
XML_PATH_MEASUREMENT_ID = "google/serverside_analytics/general/measurement_id"
XML_PATH_API_SECRET = "google/serverside_analytics/general/api_secret"
XML_PATH_ENABLE_LOGGING = "google/serverside_analytics/developer/enable_logging"
XML_PATH_DEBUG = "google/serverside_analytics/developer/debug"
XML_PATH_TAX_DISPLAY_TYPE = "tax/display/type"

_FALSY_FLAGS = {"", "0", "false", "no", "off"}


class StoreConfig(Protocol):
    def get_value(self, key: str, scope: str = SCOPE_STORE) -> Any: ...

    def is_flag_set(self, key: str, scope: str = SCOPE_STORE) -> bool: ...


def flag_value(value: Any) -> bool:
    """Interpret a stored config value as a boolean flag."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() not in _FALSY_FLAGS
    return bool(value)


class StaticStoreConfig:
    """Config values held in memory, resolved per emulated store.

    Usage::

        emulation = StoreEmulation()
        config = StaticStoreConfig(
            defaults={XML_PATH_ENABLED: "1"},
            stores={"2": {XML_PATH_ENABLED: "0"}},
            emulation=emulation,
        )

    Store-scoped reads use the emulated store's values and fall back to
    the defaults; default-scoped reads only see the defaults.
    """

    def __init__(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        stores: Optional[Mapping[str, Mapping[str, Any]]] = None,
        *,
        emulation: Optional[StoreEmulation] = None,
    ):
        self.defaults: Dict[str, Any] = dict(defaults or {})
        self.stores: Dict[str, Dict[str, Any]] = {
            str(store_id): dict(values) for store_id, values in (stores or {}).items()
        }
        self.emulation = emulation

    def get_value(self, key: str, scope: str = SCOPE_STORE) -> Any:
        if scope == SCOPE_STORE and self.emulation is not None:
            store_id = self.emulation.current_store_id
            store_values = self.stores.get(str(store_id), {})
            if key in store_values:
                return store_values[key]
        return self.defaults.get(key)

    def is_flag_set(self, key: str, scope: str = SCOPE_STORE) -> bool:
        return flag_value(self.get_value(key, scope))
