from shared.exceptions.errors import ValidationError
from shared.extract.TextExtractorInterface import TextExtractorInterface
from shared.models.document import ExtractedText


class TextExtractorPlain(TextExtractorInterface):
    """Extractor for UTF-8 text uploads. Form feeds are counted as page breaks."""

    def supports(self, content_type: str | None) -> bool:
        return content_type is None or content_type.startswith("text/")

    def extract(self, blob: bytes) -> ExtractedText:
        try:
            text = blob.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError(f"Upload is not valid UTF-8 text: {e}") from e
        return ExtractedText(
            content=text,
            page_count=text.count("\f") + 1,
            word_count=len(text.split()),
        )
