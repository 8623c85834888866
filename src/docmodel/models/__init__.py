"""Object model over document-analysis block records.

The record set (a flat list of typed blocks linked by ID) is indexed once
and exposed through thin views that read from, and write through to, the
caller's own dicts.

Model Hierarchy:
- Document → Pages → Lines → Words
- Page → Tables → Rows → Cells / MergedCells → Words / SelectionElements
- Page → Form → Fields → FieldKey / FieldValue
"""

from .base import (
    AggregationMethod,
    BlockType,
    BlockView,
    BoundingBox,
    DocumentModelError,
    DocumentStructureError,
    EntityType,
    Geometry,
    IndexOutOfRangeError,
    Point,
    RelationshipType,
    SelectionStatus,
    TableCellEntityType,
    TableEntityType,
    TableTypeError,
    TextType,
    aggregate,
)
from .content import (
    Line,
    SelectionElement,
    Word,
    wrap_content,
)
from .document import (
    Document,
    Page,
)
from .form import (
    Field,
    FieldKey,
    FieldValue,
    Form,
)
from .grid import GridResolver
from .index import (
    BlockIndex,
    RelationshipResolver,
    extract_blocks,
)
from .table import (
    Cell,
    EmptyCell,
    MergedCell,
    Row,
    Table,
    resolve_table_type,
)

__all__ = [
    # Base types
    "AggregationMethod",
    "BlockType",
    "BlockView",
    "BoundingBox",
    "EntityType",
    "Geometry",
    "Point",
    "RelationshipType",
    "SelectionStatus",
    "TableCellEntityType",
    "TableEntityType",
    "TextType",
    "aggregate",
    # Errors
    "DocumentModelError",
    "DocumentStructureError",
    "IndexOutOfRangeError",
    "TableTypeError",
    # Index
    "BlockIndex",
    "RelationshipResolver",
    "extract_blocks",
    # Content
    "Line",
    "SelectionElement",
    "Word",
    "wrap_content",
    # Table
    "Cell",
    "EmptyCell",
    "GridResolver",
    "MergedCell",
    "Row",
    "Table",
    "resolve_table_type",
    # Form
    "Field",
    "FieldKey",
    "FieldValue",
    "Form",
    # Document
    "Document",
    "Page",
]
