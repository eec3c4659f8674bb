"""
Document normalization: one text string per document for embedding.

The document's native text comes first, followed by the OCR output of each
of its images in the order the document lists them. OCR runs concurrently
across images; completion order never affects the result.
"""

import asyncio
import logging
from enum import Enum

from docsim.data_sources.document_store import DocumentExtractor
from docsim.services.image_text import ImageTextExtractor

logger = logging.getLogger(__name__)


class ImageFailurePolicy(str, Enum):
    """What to do when OCR for one image fails."""

    FAIL_FAST = "fail_fast"  # the whole normalization fails with that error
    SKIP = "skip"  # log, drop the image, keep the rest


class DocumentNormalizer:
    """Composes document extraction and image OCR into a single text."""

    def __init__(
        self,
        extractor: DocumentExtractor,
        image_extractor: ImageTextExtractor,
        image_failure_policy: ImageFailurePolicy = ImageFailurePolicy.FAIL_FAST,
    ) -> None:
        self.extractor = extractor
        self.image_extractor = image_extractor
        self.image_failure_policy = image_failure_policy

    async def normalize(self, document_id: str) -> str:
        """Return the normalized text for *document_id*.

        Args:
            document_id: Id understood by the document store.

        Returns:
            Native text and OCR outputs joined by single spaces, images in
            document order. A document without images yields its text as is.

        Raises:
            DocumentNotFound / ExtractionFailure from the extractor.
            BlobNotFound / StorageFailure / OcrFailure from the first failing
            image, unless the policy is SKIP.
        """
        parts = await self.extractor.extract_parts(document_id)
        if not parts.images:
            return parts.text

        skip = self.image_failure_policy is ImageFailurePolicy.SKIP
        # gather keeps results aligned with parts.images
        results = await asyncio.gather(
            *(self.image_extractor.extract_image_text(ref) for ref in parts.images),
            return_exceptions=skip,
        )

        ocr_texts: list[str] = []
        for ref, result in zip(parts.images, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    "Skipping image %s of document %s: %s", ref, document_id, result
                )
                continue
            ocr_texts.append(result)

        logger.debug(
            "Normalized document %s with %d/%d images",
            document_id,
            len(ocr_texts),
            len(parts.images),
        )
        return " ".join([parts.text, *ocr_texts])
