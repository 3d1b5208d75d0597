import pytest

from services.evaluation.calibration import calibrate_confidence


def test_context_boost():
    assert calibrate_confidence(0.9, 2) == pytest.approx(0.96)


def test_no_context_penalty():
    assert calibrate_confidence(0.9, 0) == pytest.approx(0.855)


def test_boost_is_capped():
    assert calibrate_confidence(0.5, 10) == pytest.approx(0.6)


@pytest.mark.parametrize("confidence", [0.0, 0.3, 0.95, 1.0])
@pytest.mark.parametrize("context_size", [0, 1, 3, 50])
def test_result_stays_in_unit_interval(confidence, context_size):
    assert 0.0 <= calibrate_confidence(confidence, context_size) <= 1.0
