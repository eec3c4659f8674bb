"""Command-line interface for docsim."""

import asyncio
import json
import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from docsim.config import get_settings
from docsim.data_sources.document_store import JsonDocumentStore
from docsim.errors import DocSimError
from docsim.factory import build_similarity_service
from docsim.services.normalizer import ImageFailurePolicy


async def _compare(
    doc1: str,
    doc2: str,
    documents: Path,
    blob_dir: str | None,
    skip_failed_images: bool,
) -> float:
    settings = get_settings()
    if blob_dir is not None:
        settings = settings.model_copy(update={"blob_dir": blob_dir, "blob_base_url": ""})

    service = build_similarity_service(
        JsonDocumentStore(documents),
        settings,
        image_failure_policy=(
            ImageFailurePolicy.SKIP if skip_failed_images else ImageFailurePolicy.FAIL_FAST
        ),
    )
    try:
        return await service.similarity(doc1, doc2)
    finally:
        await service.aclose()


@click.group()
@click.version_option(package_name="document-similarity")
def main():
    """docsim: semantic similarity between documents."""
    load_dotenv()


@main.command()
@click.argument("doc1")
@click.argument("doc2")
@click.option(
    "-d",
    "--documents",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON manifest mapping document ids to text and image references",
)
@click.option(
    "-b",
    "--blob-dir",
    type=click.Path(exists=True, file_okay=False),
    help="Directory holding the images (overrides BLOB_DIR / BLOB_BASE_URL)",
)
@click.option(
    "--skip-failed-images",
    is_flag=True,
    help="Drop images whose OCR fails instead of failing the comparison",
)
@click.option("-o", "--output", type=click.Path(), help="Output file path (JSON)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def compare(
    doc1: str,
    doc2: str,
    documents: Path,
    blob_dir: str | None,
    skip_failed_images: bool,
    output: str | None,
    verbose: bool,
):
    """Compute the cosine similarity between documents DOC1 and DOC2."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        score = asyncio.run(_compare(doc1, doc2, documents, blob_dir, skip_failed_images))
    except DocSimError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Similarity {doc1} vs {doc2}: {score:.4f}")

    if output:
        Path(output).write_text(
            json.dumps(
                {"document_1": doc1, "document_2": doc2, "similarity": score}, indent=2
            )
        )
        click.echo(f"Results saved to: {output}")


if __name__ == "__main__":
    main()
