"""Form views - key/value fields built from KEY_VALUE_SET blocks."""

from typing import Iterator, Optional

from rapidfuzz import fuzz

from docmodel.config import settings

from .base import (
    AggregationMethod,
    BlockType,
    BlockView,
    EntityType,
    RelationshipType,
    aggregate,
)
from .content import Content, join_text, wrap_content
from .index import RelationshipResolver


class FieldComponent(BlockView):
    """Key or value half of a form field."""

    def __init__(self, block: dict, resolver: RelationshipResolver, parent_field: "Field"):
        super().__init__(block)
        self.parent_field = parent_field
        self._content = [
            wrap_content(b, self) for b in resolver.resolve(block, RelationshipType.CHILD)
        ]

    def list_content(self) -> list[Content]:
        return list(self._content)

    @property
    def text(self) -> str:
        return join_text(self._content)


class FieldKey(FieldComponent):
    """The label half of a form field."""


class FieldValue(FieldComponent):
    """The answer half of a form field."""


class Field:
    """A key paired with its (optional) value."""

    def __init__(self, key_block: dict, resolver: RelationshipResolver, parent_form: "Form"):
        self.parent_form = parent_form
        self.key = FieldKey(key_block, resolver, self)

        value_blocks = [
            b
            for b in resolver.resolve(key_block, RelationshipType.VALUE)
            if b["BlockType"] == BlockType.KEY_VALUE_SET.value
        ]
        self.value: Optional[FieldValue] = (
            FieldValue(value_blocks[0], resolver, self) if value_blocks else None
        )

    @property
    def confidence(self) -> Optional[float]:
        """Mean of key and value confidence where both are present."""
        parts = [p for p in (self.key, self.value) if p is not None]
        scores = [p.confidence for p in parts if p.confidence is not None]
        return aggregate(scores, AggregationMethod.MEAN) if scores else None

    def __str__(self) -> str:
        key_text = self.key.text
        value_text = self.value.text if self.value is not None else ""
        # Keys usually carry their own trailing colon
        separator = " " if key_text.endswith(":") else ": "
        return f"{key_text}{separator}{value_text}"

    def __repr__(self) -> str:
        return f"Field(key={self.key.text!r})"


class Form:
    """All key/value fields found on one page."""

    def __init__(self, kv_blocks: list[dict], resolver: RelationshipResolver, parent_page=None):
        self.parent_page = parent_page
        self._fields = [
            Field(b, resolver, self)
            for b in kv_blocks
            if EntityType.KEY.value in (b.get("EntityTypes") or [])
        ]

    @property
    def n_fields(self) -> int:
        return len(self._fields)

    @property
    def fields(self) -> list[Field]:
        return list(self._fields)

    def iter_fields(self) -> Iterator[Field]:
        return iter(self._fields)

    def list_fields(self) -> list[Field]:
        return list(self._fields)

    def get_field_by_key(self, key: str) -> Optional[Field]:
        """First field whose key text equals ``key`` (surrounding whitespace ignored)."""
        wanted = key.strip()
        for field in self._fields:
            if field.key.text.strip() == wanted:
                return field
        return None

    def search_fields_by_key(
        self,
        key: str,
        threshold: Optional[float] = None,
    ) -> list[Field]:
        """Fields whose key fuzzily contains ``key``, best match first.

        Args:
            key: Text to look for in field keys (case-insensitive).
            threshold: Minimum rapidfuzz ``partial_ratio`` score (0-100);
                defaults to ``settings.field_search_threshold``.
        """
        if threshold is None:
            threshold = settings.field_search_threshold
        query = key.strip().casefold()

        scored = []
        for position, field in enumerate(self._fields):
            score = fuzz.partial_ratio(query, field.key.text.casefold())
            if score >= threshold:
                scored.append((-score, position, field))
        scored.sort(key=lambda item: item[:2])
        return [field for _, _, field in scored]

    def __str__(self) -> str:
        return "\n".join(str(f) for f in self._fields)
