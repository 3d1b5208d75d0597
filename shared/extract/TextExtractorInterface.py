from abc import ABC, abstractmethod

from shared.models.document import ExtractedText


class TextExtractorInterface(ABC):
    """Turns a raw uploaded blob into plain text plus page and word counts."""

    @abstractmethod
    def supports(self, content_type: str | None) -> bool:
        pass

    @abstractmethod
    def extract(self, blob: bytes) -> ExtractedText:
        """
        Raises:
            ValidationError: If the blob cannot be read as text.
        """
        pass
