import pytest

from shared.exceptions.errors import DimensionMismatchError
from shared.index.VectorIndexManager import VectorIndexManager
from shared.index.linear.VectorIndexLinear import VectorIndexLinear, cosine_similarity


@pytest.fixture
def index(helper_config) -> VectorIndexLinear:
    return VectorIndexLinear(helper_config=helper_config)


def test_cosine_properties():
    a, b = [1.0, 2.0, 3.0], [-2.0, 0.5, 1.0]
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))
    assert -1.0 <= cosine_similarity(a, b) <= 1.0
    assert cosine_similarity(a, a) == pytest.approx(1.0)
    assert cosine_similarity(a, [0.0, 0.0, 0.0]) == 0.0
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)


def test_cosine_length_mismatch():
    with pytest.raises(DimensionMismatchError):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


def test_empty_index_returns_nothing(index):
    assert index.query([1.0, 0.0], 3) == []
    assert index.size() == 0
    assert index.dimension is None


def test_query_returns_min_k_size_in_descending_order(index):
    index.upsert("a", [1.0, 0.0, 0.0])
    index.upsert("b", [0.7, 0.7, 0.0])
    index.upsert("c", [0.0, 1.0, 0.0])
    index.upsert("d", [-1.0, 0.0, 0.0])

    hits = index.query([1.0, 0.1, 0.0], 3)
    assert [h.id for h in hits] == ["a", "b", "c"]
    scores = [h.score for h in hits]
    assert scores == sorted(scores, reverse=True)

    assert len(index.query([1.0, 0.0, 0.0], 10)) == 4
    assert index.query([1.0, 0.0, 0.0], 0) == []


def test_upserted_vector_is_its_own_best_match(index):
    index.upsert("x", [0.3, -0.2, 0.9], payload={"content": "hello"})
    index.upsert("y", [0.9, 0.1, 0.0])
    top = index.query([0.3, -0.2, 0.9], 1)[0]
    assert top.id == "x"
    assert top.score == pytest.approx(1.0)
    assert top.payload == {"content": "hello"}


def test_ties_keep_insertion_order(index):
    index.upsert("first", [1.0, 0.0])
    index.upsert("second", [2.0, 0.0])
    index.upsert("third", [3.0, 0.0])
    # replacing an id keeps its original position
    index.upsert("first", [5.0, 0.0])
    assert [h.id for h in index.query([1.0, 0.0], 3)] == ["first", "second", "third"]


def test_dimension_is_fixed_by_first_upsert(index):
    index.upsert("a", [1.0, 0.0, 0.0])
    assert index.dimension == 3
    with pytest.raises(DimensionMismatchError) as excinfo:
        index.upsert("b", [1.0, 0.0])
    assert excinfo.value.expected == 3
    assert excinfo.value.actual == 2
    with pytest.raises(DimensionMismatchError):
        index.query([1.0, 0.0], 1)
    with pytest.raises(DimensionMismatchError):
        index.upsert("c", [])


def test_configured_dimension(helper_config, monkeypatch):
    monkeypatch.setenv("INDEX_LINEAR_DIMENSION", "4")
    index = VectorIndexLinear(helper_config=helper_config)
    assert index.dimension == 4
    with pytest.raises(DimensionMismatchError):
        index.upsert("a", [1.0, 2.0, 3.0])


def test_zero_vector_scores_zero(index):
    index.upsert("zero", [0.0, 0.0])
    index.upsert("one", [1.0, 0.0])
    hits = index.query([1.0, 0.0], 2)
    assert [h.id for h in hits] == ["one", "zero"]
    assert hits[1].score == 0.0


def test_remove_get_and_clear(index):
    index.upsert("a", [1.0, 0.0], payload={"filename": "a.txt"})
    index.upsert("b", [0.0, 1.0])
    assert index.get("a").payload == {"filename": "a.txt"}
    index.remove("a")
    index.remove("missing")
    assert index.get("a") is None
    assert index.size() == 1
    index.clear()
    assert index.size() == 0
    assert index.dimension == 2


def test_manager_selects_engine(helper_config, monkeypatch):
    assert isinstance(VectorIndexManager(helper_config).get_index(), VectorIndexLinear)
    monkeypatch.setenv("INDEX_ENGINE", "hnsw")
    with pytest.raises(ValueError):
        VectorIndexManager(helper_config)


def test_nested_vectors_are_rejected(index):
    index.upsert("a", [1.0, 0.0, 0.0, 0.0])
    nested = [[1.0, 0.0], [0.0, 1.0]]
    with pytest.raises(DimensionMismatchError) as excinfo:
        index.upsert("b", nested)
    assert excinfo.value.expected == 4
    assert excinfo.value.actual == 2
    with pytest.raises(DimensionMismatchError):
        index.query(nested, 1)
    with pytest.raises(DimensionMismatchError):
        cosine_similarity(nested, [1.0, 0.0, 0.0, 0.0])
    assert index.size() == 1


def test_nested_vector_cannot_fix_dimension(index):
    with pytest.raises(DimensionMismatchError):
        index.upsert("a", [[1.0, 0.0], [0.0, 1.0]])
    assert index.dimension is None
