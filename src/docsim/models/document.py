"""Pydantic models for documents and their embeddings."""

from pydantic import BaseModel, model_validator

# Immutable once produced; length is fixed by the embedding model.
EmbeddingVector = tuple[float, ...]


class DocumentParts(BaseModel):
    """Native text and ordered image references for a single document.

    Returned by a DocumentStore. Image order is preserved all the way through
    to the normalized text.
    """

    text: str = ""
    images: list[str] = []

    @model_validator(mode="before")
    @classmethod
    def coerce_nones(cls, values: dict) -> dict:
        for field_name, field_info in cls.model_fields.items():
            if values.get(field_name) is None and field_info.default is not None:
                values[field_name] = field_info.default
        return values
