from abc import ABC, abstractmethod

from shared.helper.HelperConfig import HelperConfig


class KeyValueStoreInterface(ABC):
    """String-keyed store used to persist documents, results and embeddings.

    Values are JSON strings; callers (de)serialise their own models.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()

    def get_engine_name(self) -> str:
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; no-op if absent."""
        pass

    @abstractmethod
    def keys(self, pattern: str) -> list[str]:
        """Return all keys matching pattern.

        Args:
            pattern (str): An exact key, or a prefix followed by "*" (e.g. "doc:*").
        """
        pass
