"""Base models and common types for the document model.

The enums mirror the vocabulary of the analysis record set exactly (field
values are compared against raw record strings), so members are ``str``
enums whose values are the wire spellings.
"""

from enum import Enum
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, Field

from docmodel.config import settings


class BlockType(str, Enum):
    """Types of block records in an analysis response."""

    PAGE = "PAGE"
    LINE = "LINE"
    WORD = "WORD"
    TABLE = "TABLE"
    CELL = "CELL"
    MERGED_CELL = "MERGED_CELL"
    KEY_VALUE_SET = "KEY_VALUE_SET"
    SELECTION_ELEMENT = "SELECTION_ELEMENT"
    TABLE_TITLE = "TABLE_TITLE"
    TABLE_FOOTER = "TABLE_FOOTER"
    SIGNATURE = "SIGNATURE"
    QUERY = "QUERY"
    QUERY_RESULT = "QUERY_RESULT"


class RelationshipType(str, Enum):
    """Kinds of outgoing relationship a block may hold."""

    CHILD = "CHILD"
    VALUE = "VALUE"
    MERGED_CELL = "MERGED_CELL"
    COMPLEX_FEATURES = "COMPLEX_FEATURES"
    TITLE = "TITLE"
    ANSWER = "ANSWER"
    TABLE = "TABLE"
    TABLE_TITLE = "TABLE_TITLE"
    TABLE_FOOTER = "TABLE_FOOTER"


class EntityType(str, Enum):
    """Entity tags on KEY_VALUE_SET blocks."""

    KEY = "KEY"
    VALUE = "VALUE"


class TableEntityType(str, Enum):
    """Structural classification tags on TABLE blocks."""

    STRUCTURED_TABLE = "STRUCTURED_TABLE"
    SEMI_STRUCTURED_TABLE = "SEMI_STRUCTURED_TABLE"


class TableCellEntityType(str, Enum):
    """Entity tags on CELL and MERGED_CELL blocks."""

    COLUMN_HEADER = "COLUMN_HEADER"
    TABLE_TITLE = "TABLE_TITLE"
    TABLE_FOOTER = "TABLE_FOOTER"
    TABLE_SECTION_TITLE = "TABLE_SECTION_TITLE"
    TABLE_SUMMARY = "TABLE_SUMMARY"
    # Short aliases used by older responses
    FOOTER = "FOOTER"
    SUMMARY = "SUMMARY"


class SelectionStatus(str, Enum):
    """State of a detected checkbox or radio button."""

    SELECTED = "SELECTED"
    NOT_SELECTED = "NOT_SELECTED"


class TextType(str, Enum):
    """How a word was written."""

    PRINTED = "PRINTED"
    HANDWRITING = "HANDWRITING"


class AggregationMethod(str, Enum):
    """Reduction applied to a sequence of confidence scores."""

    MIN = "min"
    MAX = "max"
    MEAN = "mean"


class DocumentModelError(Exception):
    """Base class for errors raised by the document model."""


class DocumentStructureError(DocumentModelError, ValueError):
    """The supplied record set is not a well-formed block sequence."""


class IndexOutOfRangeError(DocumentModelError, IndexError):
    """A row, column, table, page or word index is outside its valid range."""


class TableTypeError(DocumentModelError, ValueError):
    """A table carries contradictory structural classification tags."""


def check_index(name: str, value: int, lower: int, upper: int) -> int:
    """Raise IndexOutOfRangeError unless ``lower <= value <= upper``."""
    if not lower <= value <= upper:
        raise IndexOutOfRangeError(
            f"{name} {value} out of range: expected {lower} <= {name.lower()} <= {upper}"
        )
    return value


def aggregate(
    scores: Iterable[float],
    method: Union[AggregationMethod, str, None] = None,
) -> float:
    """Reduce a non-empty sequence of confidence scores.

    Args:
        scores: Confidence values (any granularity: content, cell, row).
        method: Aggregation method; defaults to the configured method
            (``mean`` unless overridden in settings).

    Returns:
        The minimum, maximum or arithmetic mean of ``scores``.
    """
    if method is None:
        method = settings.aggregation_method
    method = AggregationMethod(method)

    values = list(scores)
    if not values:
        raise ValueError("Cannot aggregate an empty sequence of confidence scores")

    if method == AggregationMethod.MIN:
        return min(values)
    if method == AggregationMethod.MAX:
        return max(values)
    return sum(values) / len(values)


class Point(BaseModel):
    """A polygon vertex in page-relative coordinates."""

    x: float = Field(..., alias="X")
    y: float = Field(..., alias="Y")


class BoundingBox(BaseModel):
    """Axis-aligned box as page-relative ratios (0-1)."""

    width: float = Field(..., alias="Width")
    height: float = Field(..., alias="Height")
    left: float = Field(..., alias="Left")
    top: float = Field(..., alias="Top")


class Geometry:
    """Geometry payload of a block, linked back to the view that owns it."""

    def __init__(self, geometry_dict: dict, parent_object: Any):
        self._dict = geometry_dict
        self.parent_object = parent_object

    @property
    def dict(self) -> dict:
        return self._dict

    @property
    def bounding_box(self) -> Optional[BoundingBox]:
        raw = self._dict.get("BoundingBox")
        return BoundingBox.model_validate(raw) if raw else None

    @property
    def polygon(self) -> list[Point]:
        return [Point.model_validate(p) for p in self._dict.get("Polygon") or []]


class BlockView:
    """Thin view over one raw block record.

    Views never copy the record: every read goes to the underlying dict and
    every write (confidence) lands in it, so the caller's record set always
    reflects the current state.
    """

    def __init__(self, block: dict):
        self._dict = block

    @property
    def dict(self) -> dict:
        """The raw block record this view wraps."""
        return self._dict

    @property
    def id(self) -> str:
        return self._dict["Id"]

    @property
    def block_type(self) -> str:
        return self._dict["BlockType"]

    @property
    def confidence(self) -> Optional[float]:
        return self._dict.get("Confidence")

    @confidence.setter
    def confidence(self, value: float) -> None:
        self._dict["Confidence"] = value

    @property
    def entity_types(self) -> list[str]:
        return list(self._dict.get("EntityTypes") or [])

    @property
    def geometry(self) -> Geometry:
        return Geometry(self._dict.get("Geometry") or {}, self)

    @property
    def text(self) -> str:
        return self._dict.get("Text") or ""

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._dict.get('Id')!r})"
