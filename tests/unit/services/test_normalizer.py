"""Unit tests for DocumentNormalizer."""

import asyncio

import pytest

from docsim.data_sources.document_store import DocumentExtractor, InMemoryDocumentStore
from docsim.errors import BlobNotFound, DocumentNotFound, OcrFailure
from docsim.services.image_text import ImageTextExtractor
from docsim.services.normalizer import DocumentNormalizer, ImageFailurePolicy


def _normalizer(store, blobs, ocr, policy=ImageFailurePolicy.FAIL_FAST):
    return DocumentNormalizer(
        DocumentExtractor(store), ImageTextExtractor(blobs, ocr), image_failure_policy=policy
    )


async def test_concatenates_text_and_ocr_in_image_order(normalizer):
    text = await normalizer.normalize("doc1")
    assert text == "quarterly revenue report revenue grew totals by region"


async def test_document_without_images_is_text_only(normalizer, blob_store):
    text = await normalizer.normalize("doc3")

    assert text == "hiking trails in the alps"
    assert blob_store.calls == []


async def test_preserves_image_order_when_later_image_finishes_first(
    blob_store, make_ocr
):
    store = InMemoryDocumentStore()
    store.add("doc", "intro", ["img1", "img2"])
    # img1 is slow, img2 is fast: completion order is img2, img1.
    ocr = make_ocr(texts={b"img1": "B", b"img2": "A"}, delays={b"img1": 0.05})

    text = await _normalizer(store, blob_store, ocr).normalize("doc")

    assert ocr.completed == [b"img2", b"img1"]
    assert text.endswith("B A")
    assert text == "intro B A"


async def test_ocr_runs_concurrently(blob_store, make_ocr):
    store = InMemoryDocumentStore()
    refs = [f"img{i}" for i in range(5)]
    store.add("doc", "t", refs)
    ocr = make_ocr(delays={ref.encode(): 0.1 for ref in refs})

    loop = asyncio.get_running_loop()
    start = loop.time()
    await _normalizer(store, blob_store, ocr).normalize("doc")
    elapsed = loop.time() - start

    assert len(ocr.completed) == 5
    assert elapsed < 0.4


async def test_unknown_document_raises_not_found(normalizer):
    with pytest.raises(DocumentNotFound):
        await normalizer.normalize("missing-doc")


async def test_fail_fast_surfaces_underlying_image_error(make_blob_store, ocr):
    store = InMemoryDocumentStore()
    store.add("doc", "t", ["chart.png", "gone.png"])
    blobs = make_blob_store(missing={"gone.png"})

    with pytest.raises(BlobNotFound) as exc_info:
        await _normalizer(store, blobs, ocr).normalize("doc")

    assert exc_info.value.ref == "gone.png"


async def test_skip_policy_drops_failed_images_and_keeps_order(blob_store, make_ocr, caplog):
    store = InMemoryDocumentStore()
    store.add("doc", "start", ["a", "bad", "c"])
    ocr = make_ocr(texts={b"a": "first", b"c": "third"}, failing={b"bad"})

    with caplog.at_level("WARNING", logger="docsim.services.normalizer"):
        text = await _normalizer(
            store, blob_store, ocr, ImageFailurePolicy.SKIP
        ).normalize("doc")

    assert text == "start first third"
    assert "Skipping image bad" in caplog.text


async def test_skip_policy_still_fails_on_missing_document(blob_store, ocr):
    normalizer = _normalizer(InMemoryDocumentStore(), blob_store, ocr, ImageFailurePolicy.SKIP)

    with pytest.raises(DocumentNotFound):
        await normalizer.normalize("nope")


async def test_fail_fast_is_default(normalizer):
    assert normalizer.image_failure_policy is ImageFailurePolicy.FAIL_FAST


async def test_ocr_failure_fails_normalization(blob_store, make_ocr):
    store = InMemoryDocumentStore()
    store.add("doc", "t", ["x"])

    with pytest.raises(OcrFailure):
        await _normalizer(store, blob_store, make_ocr(failing={b"x"})).normalize("doc")
