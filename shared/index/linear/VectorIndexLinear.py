"""In-memory vector index answering queries by a full linear scan.

Sized for hundreds to low thousands of documents. An approximate index can
replace it through VectorIndexInterface without touching its callers.
"""

import threading
from typing import Sequence

import numpy as np

from shared.exceptions.errors import DimensionMismatchError
from shared.helper.HelperConfig import HelperConfig
from shared.index.VectorIndexInterface import VectorIndexInterface
from shared.index.models.IndexHit import IndexHit
from shared.models.config import EnvConfig


def _as_vector(vector: Sequence[float], expected: int | None) -> np.ndarray:
    """Convert to a flat float array.

    Raises:
        DimensionMismatchError: If vector is not one-dimensional (e.g. a nested list).
    """
    arr = np.asarray(vector, dtype=np.float64)
    if arr.ndim != 1:
        raise DimensionMismatchError(expected=expected or 0, actual=len(arr) if arr.ndim else 0)
    return arr


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between a and b; 0.0 if either has zero norm.

    Raises:
        DimensionMismatchError: If a and b differ in length or either is not one-dimensional.
    """
    va = _as_vector(a, expected=None)
    vb = _as_vector(b, expected=va.shape[0])
    if va.shape != vb.shape:
        raise DimensionMismatchError(expected=va.shape[0], actual=vb.shape[0])
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / (norm_a * norm_b), -1.0, 1.0))


class VectorIndexLinear(VectorIndexInterface):
    """Brute-force cosine index.

    Ties in similarity are ordered by insertion; replacing the vector of an
    existing id keeps that id's original position.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        configured = int(self.get_config_val("DIMENSION", default=0, val_type="number"))
        self._dimension: int | None = configured if configured > 0 else None
        self._vectors: dict[str, np.ndarray] = {}
        self._payloads: dict[str, dict] = {}
        self._lock = threading.RLock()

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_engine_name(self) -> str:
        return "Linear"

    def _get_required_config(self) -> list[EnvConfig]:
        return [EnvConfig(env_key="DIMENSION", val_type="number", default=0)]

    @property
    def dimension(self) -> int | None:
        return self._dimension

    def size(self) -> int:
        with self._lock:
            return len(self._vectors)

    ##########################################
    ############### OPERATIONS ###############
    ##########################################

    def upsert(self, id: str, vector: Sequence[float], payload: dict | None = None) -> None:
        with self._lock:
            arr = _as_vector(vector, expected=self._dimension)
            if arr.size == 0:
                raise DimensionMismatchError(expected=self._dimension or 0, actual=0)
            if self._dimension is None:
                self._dimension = int(arr.size)
                self.logging.info("Vector index dimension fixed to %d by id %s.", self._dimension, id)
            elif arr.size != self._dimension:
                self.logging.error(
                    "Refusing vector for %s: dimension %d, index dimension %d.", id, arr.size, self._dimension
                )
                raise DimensionMismatchError(expected=self._dimension, actual=int(arr.size))
            self._vectors[id] = arr
            self._payloads[id] = dict(payload or {})
        self.logging.debug("Upserted vector for %s.", id)

    def query(self, vector: Sequence[float], k: int) -> list[IndexHit]:
        with self._lock:
            if not self._vectors or k <= 0:
                return []
            query = _as_vector(vector, expected=self._dimension)
            if query.size != self._dimension:
                raise DimensionMismatchError(expected=self._dimension, actual=int(query.size))
            ids = list(self._vectors.keys())
            matrix = np.vstack([self._vectors[i] for i in ids])
            payloads = {i: dict(self._payloads[i]) for i in ids}

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        scores = np.zeros(len(ids), dtype=np.float64)
        nonzero = norms > 0.0
        scores[nonzero] = np.clip(dots[nonzero] / norms[nonzero], -1.0, 1.0)

        # stable sort keeps insertion order among equal scores
        order = np.argsort(-scores, kind="stable")[:k]
        return [IndexHit(id=ids[i], score=float(scores[i]), payload=payloads[ids[i]]) for i in order]

    def remove(self, id: str) -> None:
        with self._lock:
            self._vectors.pop(id, None)
            self._payloads.pop(id, None)

    def get(self, id: str) -> IndexHit | None:
        with self._lock:
            if id not in self._vectors:
                return None
            return IndexHit(id=id, score=1.0, payload=dict(self._payloads[id]))

    def clear(self) -> None:
        with self._lock:
            self._vectors.clear()
            self._payloads.clear()
