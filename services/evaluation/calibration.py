"""Post-hoc confidence calibration based on how much precedent was retrieved."""

NO_CONTEXT_PENALTY = 0.95
BOOST_PER_CONTEXT = 0.03
MAX_CONTEXT_BOOST = 0.1


def calibrate_confidence(confidence: float, context_size: int) -> float:
    """Adjust a draft confidence by the number of similar documents found.

    No context scales the score by 0.95. Each retrieved document adds 0.03,
    capped at +0.1 in total. The result is clamped to [0, 1].
    """
    if context_size <= 0:
        adjusted = confidence * NO_CONTEXT_PENALTY
    else:
        adjusted = confidence + min(MAX_CONTEXT_BOOST, context_size * BOOST_PER_CONTEXT)
    return max(0.0, min(1.0, adjusted))
