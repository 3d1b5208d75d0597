"""Exception hierarchy shared by the index, the rule registry and the evaluation pipeline."""


class EvaluationServiceError(Exception):
    """Base class for all errors raised by the evaluation service."""


class ValidationError(EvaluationServiceError):
    """A document is missing its id or its content is empty."""


class NotFoundError(EvaluationServiceError):
    """An unknown document or rule id was requested."""


class DimensionMismatchError(EvaluationServiceError):
    """A vector does not match the dimension established by the index.

    Attributes:
        expected (int): The dimension the index was fixed to.
        actual (int): The length of the offending vector.
    """

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Vector dimension mismatch: expected {expected}, got {actual}.")


class ResponseFormatError(EvaluationServiceError):
    """The reasoning backend returned unparsable or incomplete data."""


class UpstreamError(EvaluationServiceError):
    """An embedding or reasoning call failed, timed out or returned a non-2xx status."""
