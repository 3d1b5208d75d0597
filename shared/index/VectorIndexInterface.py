from abc import ABC, abstractmethod
from typing import Any, Sequence

from shared.index.models.IndexHit import IndexHit
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class VectorIndexInterface(ABC):
    """Similarity index holding one fixed-dimension vector per id.

    Implementations must raise DimensionMismatchError for vectors whose length
    differs from the index dimension, return an empty list when queried while
    empty, and rank results by descending cosine similarity with a
    deterministic tie-break.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        for config in self._get_required_config():
            _ = self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_engine_name(self) -> str:
        """Returns the lowercase engine name, e.g. "linear"."""
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        pass

    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        pass

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """Read INDEX_<ENGINE>_<KEY> from the environment."""
        key = f"INDEX_{self.get_engine_name().upper()}_{raw_key.upper()}"
        if val_type == "number":
            return self._helper_config.get_number_val(key, default=default)
        elif val_type == "bool":
            return self._helper_config.get_bool_val(key, default=default)
        return self._helper_config.get_string_val(key, default=default)

    @property
    @abstractmethod
    def dimension(self) -> int | None:
        """The fixed vector dimension, or None before the first upsert."""
        pass

    ##########################################
    ############### OPERATIONS ###############
    ##########################################

    @abstractmethod
    def upsert(self, id: str, vector: Sequence[float], payload: dict | None = None) -> None:
        """Insert or replace the vector stored under id.

        Raises:
            DimensionMismatchError: If len(vector) differs from the index dimension.
        """
        pass

    @abstractmethod
    def query(self, vector: Sequence[float], k: int) -> list[IndexHit]:
        """Return the min(k, size) most similar entries, best first.

        Raises:
            DimensionMismatchError: If len(vector) differs from the index dimension.
        """
        pass

    @abstractmethod
    def remove(self, id: str) -> None:
        """Delete the entry for id; no-op if absent."""
        pass

    @abstractmethod
    def get(self, id: str) -> IndexHit | None:
        """Return the stored entry for id (score 1.0), or None."""
        pass

    @abstractmethod
    def size(self) -> int:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries. The dimension stays fixed."""
        pass
