import threading

from shared.helper.HelperConfig import HelperConfig
from shared.store.KeyValueStoreInterface import KeyValueStoreInterface


class KeyValueStoreMemory(KeyValueStoreInterface):
    """Process-local store. Contents are lost on restart."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def _get_engine_name(self) -> str:
        return "Memory"

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self, pattern: str) -> list[str]:
        with self._lock:
            if pattern.endswith("*"):
                prefix = pattern[:-1]
                return [k for k in self._data if k.startswith(prefix)]
            return [pattern] if pattern in self._data else []
