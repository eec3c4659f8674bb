"""Extracts text from a single image: blob fetch followed by OCR."""

import logging

from docsim.data_sources.blob_store import BlobStore
from docsim.data_sources.ocr import OcrService
from docsim.errors import BlobNotFound, OcrFailure, StorageFailure

logger = logging.getLogger(__name__)


class ImageTextExtractor:
    """Fetches an image from the blob store and runs OCR over it."""

    def __init__(self, blob_store: BlobStore, ocr: OcrService) -> None:
        self.blob_store = blob_store
        self.ocr = ocr

    async def extract_image_text(self, ref: str) -> str:
        """Return the OCR text for the image at *ref*.

        An image with no recognizable text gives "". Raises BlobNotFound or
        StorageFailure if the bytes cannot be fetched, OcrFailure if
        recognition fails.
        """
        try:
            data = await self.blob_store.get(ref)
        except (BlobNotFound, StorageFailure):
            raise
        except Exception as e:
            raise StorageFailure("blob_store", f"Unexpected error fetching '{ref}': {e}") from e

        try:
            text = await self.ocr.recognize(data)
        except OcrFailure:
            raise
        except Exception as e:
            raise OcrFailure("ocr", f"Unexpected error recognizing '{ref}': {e}") from e

        text = text or ""
        logger.debug("OCR for %s returned %d chars", ref, len(text))
        return text
