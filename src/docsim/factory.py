"""Builds a SimilarityService from settings."""

import logging

from docsim.config import Settings, get_settings
from docsim.data_sources.base_client import ClientConfig
from docsim.data_sources.blob_store import BlobStore, HttpBlobStore, LocalBlobStore
from docsim.data_sources.document_store import DocumentExtractor, DocumentStore
from docsim.data_sources.ocr import OcrService, ReadOcrClient
from docsim.services.embedding_model import EmbeddingModel, OpenAIEmbeddingModel
from docsim.services.embeddings import CachedEmbeddingSource, DirectEmbeddingSource
from docsim.services.image_text import ImageTextExtractor
from docsim.services.normalizer import DocumentNormalizer, ImageFailurePolicy
from docsim.services.retry import RetryConfig, RetryPolicy
from docsim.services.similarity_service import SimilarityService

logger = logging.getLogger(__name__)


def build_embedding_model(settings: Settings) -> EmbeddingModel:
    """Return the embedding model selected by ``settings.embedding_backend``."""
    if settings.embedding_backend == "sentence-transformers":
        # Imported here so the OpenAI backend does not pay for loading torch.
        from docsim.services.local_embeddings import SentenceTransformerEmbeddingModel

        return SentenceTransformerEmbeddingModel(settings.local_embedding_model)
    return OpenAIEmbeddingModel(settings.embedding_model, api_key=settings.openai_api_key)


def build_similarity_service(
    document_store: DocumentStore,
    settings: Settings | None = None,
    *,
    blob_store: BlobStore | None = None,
    ocr: OcrService | None = None,
    model: EmbeddingModel | None = None,
    image_failure_policy: ImageFailurePolicy = ImageFailurePolicy.FAIL_FAST,
) -> SimilarityService:
    """Wire the full pipeline with one embedding cache shared by all calls.

    Collaborators not passed explicitly are built from settings: an HTTP blob
    store when ``blob_base_url`` is set (otherwise files under ``blob_dir``),
    the read OCR client, and the configured embedding model. Call
    ``SimilarityService.aclose()`` when done.
    """
    settings = settings or get_settings()
    client_config = ClientConfig(timeout_seconds=settings.request_timeout)
    on_close = []

    if blob_store is None:
        if settings.blob_base_url:
            http_blobs = HttpBlobStore(settings.blob_base_url, config=client_config)
            on_close.append(http_blobs.close)
            blob_store = http_blobs
        else:
            blob_store = LocalBlobStore(settings.blob_dir)

    if ocr is None:
        ocr_client = ReadOcrClient(
            settings.ocr_endpoint,
            settings.ocr_api_key,
            poll_interval=settings.ocr_poll_interval,
            max_polls=settings.ocr_max_polls,
            config=client_config,
        )
        on_close.append(ocr_client.close)
        ocr = ocr_client

    if model is None:
        model = build_embedding_model(settings)
        if isinstance(model, OpenAIEmbeddingModel):
            on_close.append(model.close)

    retry_policy = RetryPolicy(
        RetryConfig(
            max_retries=settings.embedding_max_retries,
            backoff_base=settings.embedding_backoff_base,
            max_delay=settings.embedding_max_delay,
        )
    )
    normalizer = DocumentNormalizer(
        DocumentExtractor(document_store),
        ImageTextExtractor(blob_store, ocr),
        image_failure_policy=image_failure_policy,
    )
    source = CachedEmbeddingSource(DirectEmbeddingSource(normalizer, model, retry_policy))
    logger.debug(
        "Built similarity service: blob_store=%s ocr=%s model=%s",
        type(blob_store).__name__,
        type(ocr).__name__,
        type(model).__name__,
    )
    return SimilarityService(source, on_close=on_close)
