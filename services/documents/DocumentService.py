"""Document service.

Accepts uploads, extracts their text, embeds and indexes them, runs the
evaluation agent on request and persists documents, embeddings and results
in the key-value store.

Store layout:
  doc:<id>     Document as JSON
  emb:<id>     embedding as a JSON list of floats
  result:<id>  latest EvaluationResult as JSON
"""

import json
import uuid
from datetime import datetime

from pytz import timezone

from services.evaluation.EvaluationAgent import EvaluationAgent
from services.evaluation.ReasoningService import ReasoningService
from shared.exceptions.errors import NotFoundError, ValidationError
from shared.extract.TextExtractorInterface import TextExtractorInterface
from shared.helper.HelperConfig import HelperConfig
from shared.index.VectorIndexInterface import VectorIndexInterface
from shared.models.document import Document, DocumentMetadata, DocumentStatus
from shared.models.evaluation import EvaluationResult
from shared.models.search import SearchResultItem
from shared.store.KeyValueStoreInterface import KeyValueStoreInterface

DOC_KEY_PREFIX = "doc:"
EMBEDDING_KEY_PREFIX = "emb:"
RESULT_KEY_PREFIX = "result:"
EXCERPT_CHARS = 300


class DocumentService:
    """Ingestion, evaluation and lookup of documents."""

    def __init__(
        self,
        helper_config: HelperConfig,
        reasoning_service: ReasoningService,
        vector_index: VectorIndexInterface,
        store: KeyValueStoreInterface,
        evaluation_agent: EvaluationAgent,
        extractors: list[TextExtractorInterface],
    ) -> None:
        self.logging = helper_config.get_logger()
        self._reasoning = reasoning_service
        self._index = vector_index
        self._store = store
        self._agent = evaluation_agent
        self._extractors = extractors
        self._tz = timezone(helper_config.get_string_val("TIMEZONE", default="Europe/Berlin"))

    ##########################################
    ############### INGESTION ################
    ##########################################

    async def do_upload(
        self,
        filename: str,
        content_type: str | None,
        blob: bytes,
        document_type: str | None = None,
    ) -> Document:
        """Extract, index and store a new document.

        Args:
            filename (str): Original file name.
            content_type (str | None): MIME type used to pick the extractor.
            blob (bytes): Raw upload.
            document_type (str | None): Classification, "UNKNOWN" if not given.

        Returns:
            Document: The stored document with status UPLOADED.

        Raises:
            ValidationError: If no extractor supports the content type or the text is empty.
            UpstreamError: If embedding the content fails.
        """
        self.logging.info("Processing new document upload: %s", filename)
        extractor = self._get_extractor(content_type)
        extracted = extractor.extract(blob)
        if not extracted.content.strip():
            raise ValidationError(f"Upload '{filename}' contains no text.")

        document = Document(
            id=str(uuid.uuid4()),
            filename=filename,
            content_type=content_type,
            content=extracted.content,
            uploaded_at=datetime.now(self._tz),
            metadata=DocumentMetadata(
                document_type=document_type or "UNKNOWN",
                page_count=extracted.page_count,
                word_count=extracted.word_count,
            ),
        )
        await self.do_index(document)
        self._save_document(document)
        self.logging.info("Document uploaded successfully: %s", document.id)
        return document

    async def do_index(self, document: Document) -> None:
        """Embed the document if needed and upsert it into the vector index.

        Raises:
            UpstreamError: If embedding fails.
            DimensionMismatchError: If the embedding does not fit the index.
        """
        if not document.embedding:
            self.logging.debug("Generating embedding for document: %s", document.id)
            document.embedding = await self._reasoning.embed(document.content)
        self._index.upsert(document.id, document.embedding, payload=self._index_payload(document))
        self._store.set(EMBEDDING_KEY_PREFIX + document.id, json.dumps(document.embedding))
        self.logging.debug("Document indexed: %s (dimension %d)", document.id, len(document.embedding))

    def do_reindex(self) -> int:
        """Rebuild the vector index from the stored documents and embeddings.

        Returns:
            int: Number of documents indexed.
        """
        self._index.clear()
        count = 0
        for document in self.list_documents():
            raw = self._store.get(EMBEDDING_KEY_PREFIX + document.id)
            if raw is None:
                self.logging.warning("No stored embedding for document %s; not reindexed.", document.id)
                continue
            self._index.upsert(document.id, json.loads(raw), payload=self._index_payload(document))
            count += 1
        self.logging.info("Reindexed %d documents.", count)
        return count

    ##########################################
    ############### EVALUATION ###############
    ##########################################

    async def do_evaluate(self, document_id: str) -> EvaluationResult:
        """Run the evaluation agent on a stored document and persist the outcome.

        Raises:
            NotFoundError: If the document does not exist.
        """
        document = self.require_document(document_id)
        if document.advance_status(DocumentStatus.PROCESSING):
            self._save_document(document)
        result = await self._agent.do_evaluate(document)
        self._save_document(document)
        self._store.set(RESULT_KEY_PREFIX + document_id, result.model_dump_json())
        self.logging.info("Evaluation stored for %s: %s", document_id, result.approval_status.value)
        return result

    async def do_upload_and_evaluate(
        self,
        filename: str,
        content_type: str | None,
        blob: bytes,
        document_type: str | None = None,
    ) -> EvaluationResult:
        """Upload a document and evaluate it right away.

        Raises:
            ValidationError: If the upload is rejected; nothing is evaluated then.
            UpstreamError: If embedding the content fails.
        """
        document = await self.do_upload(filename, content_type, blob, document_type=document_type)
        return await self.do_evaluate(document.id)

    ##########################################
    ################ LOOKUP ##################
    ##########################################

    def get_document(self, document_id: str) -> Document | None:
        raw = self._store.get(DOC_KEY_PREFIX + document_id)
        return Document.model_validate_json(raw) if raw is not None else None

    def require_document(self, document_id: str) -> Document:
        document = self.get_document(document_id)
        if document is None:
            raise NotFoundError(f"Document not found: {document_id}")
        return document

    def get_evaluation_result(self, document_id: str) -> EvaluationResult | None:
        raw = self._store.get(RESULT_KEY_PREFIX + document_id)
        return EvaluationResult.model_validate_json(raw) if raw is not None else None

    def list_documents(self) -> list[Document]:
        documents = []
        for key in sorted(self._store.keys(DOC_KEY_PREFIX + "*")):
            raw = self._store.get(key)
            if raw is not None:
                documents.append(Document.model_validate_json(raw))
        return documents

    async def do_search(self, query: str, limit: int = 5) -> list[SearchResultItem]:
        """Return the indexed documents most similar to a free-text query.

        Raises:
            UpstreamError: If embedding the query fails.
        """
        vector = await self._reasoning.embed(query)
        hits = self._index.query(vector, limit)
        return [
            SearchResultItem(
                document_id=hit.id,
                filename=hit.payload.get("filename"),
                score=hit.score,
                excerpt=(hit.payload.get("content") or "")[:EXCERPT_CHARS] or None,
            )
            for hit in hits
        ]

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _get_extractor(self, content_type: str | None) -> TextExtractorInterface:
        for extractor in self._extractors:
            if extractor.supports(content_type):
                return extractor
        raise ValidationError(f"Unsupported content type: {content_type}")

    def _index_payload(self, document: Document) -> dict:
        return {"content": document.content, "filename": document.filename}

    def _save_document(self, document: Document) -> None:
        # embeddings live under emb:<id>, not inside the document record
        self._store.set(DOC_KEY_PREFIX + document.id, document.model_dump_json(exclude={"embedding"}))
