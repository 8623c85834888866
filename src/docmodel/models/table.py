"""Table views - cells, merged cells, rows and tables.

A ``Table`` resolves its CELL and MERGED_CELL children once, at
construction, and hands them to a ``GridResolver`` for position lookups.
Rows are cheap projections produced fresh on every call, so independent
iterations over one table never interfere.
"""

import logging
from typing import Iterable, Iterator, Optional, Union

from docmodel.config import settings

from .base import (
    AggregationMethod,
    BlockType,
    BlockView,
    RelationshipType,
    TableEntityType,
    TableTypeError,
    aggregate,
)
from .content import Content, join_text, wrap_content
from .grid import GridResolver
from .index import RelationshipResolver

logger = logging.getLogger(__name__)

EntityTypeQuery = Union[str, Iterable[str]]

STRUCTURAL_TABLE_TYPES = (
    TableEntityType.STRUCTURED_TABLE,
    TableEntityType.SEMI_STRUCTURED_TABLE,
)


def resolve_table_type(entity_types: Iterable[str]) -> Optional[TableEntityType]:
    """Classify a table from its entity-type tags.

    Returns:
        The single structural classification present, or ``None`` when the
        table carries neither.

    Raises:
        TableTypeError: If both structural classifications are present.
    """
    tags = set(entity_types)
    found = [t for t in STRUCTURAL_TABLE_TYPES if t.value in tags]
    if len(found) > 1:
        raise TableTypeError(
            "Table has multiple conflicting table types: "
            + ", ".join(t.value for t in found)
        )
    return found[0] if found else None


def _content_confidence(cells: Iterable, method) -> Optional[float]:
    scores = [
        item.confidence
        for cell in cells
        for item in cell.list_content()
        if item.confidence is not None
    ]
    return aggregate(scores, method) if scores else None


class CellBase(BlockView):
    """Shared accessors of ordinary and merged cells."""

    def __init__(self, block: dict, parent_table: "Table"):
        super().__init__(block)
        self.parent_table = parent_table

    @property
    def row_index(self) -> int:
        return self._dict.get("RowIndex", 0)

    @property
    def column_index(self) -> int:
        return self._dict.get("ColumnIndex", 0)

    @property
    def row_span(self) -> int:
        return self._dict.get("RowSpan") or 1

    @property
    def column_span(self) -> int:
        return self._dict.get("ColumnSpan") or 1

    def has_entity_types(self, entity_types: EntityTypeQuery) -> bool:
        """Whether this cell carries any of the given entity types."""
        if isinstance(entity_types, str):
            entity_types = [entity_types]
        own = set(self.entity_types)
        return any(getattr(t, "value", t) in own for t in entity_types)

    def list_content(self) -> list[Content]:
        raise NotImplementedError

    def iter_content(self) -> Iterator[Content]:
        return iter(self.list_content())

    @property
    def n_content(self) -> int:
        return len(self.list_content())

    @property
    def text(self) -> str:
        return join_text(self.list_content())

    def get_ocr_confidence(
        self,
        method: Union[AggregationMethod, str, None] = None,
    ) -> Optional[float]:
        """Aggregate the OCR confidence of this cell's content."""
        return _content_confidence([self], method)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self._dict.get('Id')!r}, "
            f"row={self.row_index}, column={self.column_index})"
        )


class Cell(CellBase):
    """An ordinary table cell occupying exactly one coordinate."""

    def __init__(self, block: dict, parent_table: "Table", resolver: RelationshipResolver):
        super().__init__(block, parent_table)
        self._content = [
            wrap_content(b, self) for b in resolver.resolve(block, RelationshipType.CHILD)
        ]

    def list_content(self) -> list[Content]:
        return list(self._content)


class MergedCell(CellBase):
    """A cell spanning a rectangle of ordinary cells.

    Holds no content of its own: its content is that of its constituent
    cells, concatenated in the order the record lists them.
    """

    def __init__(self, block: dict, parent_table: "Table", subcells: list[Cell]):
        super().__init__(block, parent_table)
        self._subcells = subcells

    def list_subcells(self) -> list[Cell]:
        return list(self._subcells)

    def list_content(self) -> list[Content]:
        return [item for cell in self._subcells for item in cell.list_content()]


class EmptyCell:
    """Placeholder for a coordinate with no resolved ordinary cell."""

    id = None
    block_type = None
    confidence = None
    geometry = None
    row_span = 1
    column_span = 1
    text = ""
    n_content = 0

    def __init__(self, parent_table: "Table", row_index: int, column_index: int):
        self.parent_table = parent_table
        self.row_index = row_index
        self.column_index = column_index

    @property
    def entity_types(self) -> list[str]:
        return []

    def has_entity_types(self, entity_types: EntityTypeQuery) -> bool:
        return False

    def list_content(self) -> list[Content]:
        return []

    def iter_content(self) -> Iterator[Content]:
        return iter(())

    def get_ocr_confidence(self, method=None) -> Optional[float]:
        return None

    def __str__(self) -> str:
        return ""

    def __repr__(self) -> str:
        return f"EmptyCell(row={self.row_index}, column={self.column_index})"


AnyCell = Union[Cell, MergedCell, EmptyCell]


class Row:
    """One row of a table, as produced by row iteration."""

    def __init__(self, parent_table: "Table", row_index: int, cells: list[AnyCell]):
        self.parent_table = parent_table
        self.row_index = row_index
        self._cells = cells

    @property
    def n_cells(self) -> int:
        return len(self._cells)

    def iter_cells(self) -> Iterator[AnyCell]:
        return iter(self._cells)

    def list_cells(self) -> list[AnyCell]:
        return list(self._cells)

    @property
    def text(self) -> str:
        return settings.cell_separator.join(str(c) for c in self._cells)

    def get_confidence(
        self,
        method: Union[AggregationMethod, str, None] = None,
    ) -> Optional[float]:
        """Aggregate the structure confidence of this row's cells."""
        scores = [c.confidence for c in self._cells if c.confidence is not None]
        return aggregate(scores, method) if scores else None

    def get_ocr_confidence(
        self,
        method: Union[AggregationMethod, str, None] = None,
    ) -> Optional[float]:
        """Aggregate the OCR confidence of all content in this row."""
        return _content_confidence(self._cells, method)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Row(index={self.row_index}, n_cells={self.n_cells})"


class Table(BlockView):
    """A TABLE block and its resolved cell grid."""

    def __init__(self, block: dict, resolver: RelationshipResolver, parent_page=None):
        super().__init__(block)
        self.parent_page = parent_page

        self._cells = [
            Cell(b, self, resolver)
            for b in resolver.resolve(block, RelationshipType.CHILD)
            if b["BlockType"] == BlockType.CELL.value
        ]
        cells_by_id = {c.id: c for c in self._cells}

        self._merged_cells = []
        for merged_block in resolver.resolve(block, RelationshipType.MERGED_CELL):
            if merged_block["BlockType"] != BlockType.MERGED_CELL.value:
                continue
            subcells = []
            for cell_block in resolver.resolve(merged_block, RelationshipType.CHILD):
                cell = cells_by_id.get(cell_block["Id"])
                if cell is None:
                    logger.debug(
                        "Merged cell %s lists cell %s which is not part of table %s",
                        merged_block["Id"],
                        cell_block["Id"],
                        self.id,
                    )
                    continue
                subcells.append(cell)
            self._merged_cells.append(MergedCell(merged_block, self, subcells))

        self._grid = GridResolver(
            self._cells,
            self._merged_cells,
            lambda row, column: EmptyCell(self, row, column),
        )
        logger.debug(
            "Resolved table %s: %d rows, %d columns, %d cells, %d merged cells",
            self.id,
            self.n_rows,
            self.n_columns,
            len(self._cells),
            len(self._merged_cells),
        )

    @property
    def table_type(self) -> Optional[TableEntityType]:
        """Structural classification; raises TableTypeError on conflicting tags."""
        return resolve_table_type(self.entity_types)

    @property
    def n_rows(self) -> int:
        return self._grid.n_rows

    @property
    def n_columns(self) -> int:
        return self._grid.n_columns

    @property
    def n_cells(self) -> int:
        """Number of ordinary (non-merged) cells."""
        return len(self._cells)

    def list_cells(self) -> list[Cell]:
        return list(self._cells)

    def list_merged_cells(self) -> list[MergedCell]:
        return list(self._merged_cells)

    def cell_at(
        self,
        row: int,
        column: int,
        ignore_merged: bool = False,
    ) -> Optional[AnyCell]:
        """Cell at a 1-based coordinate (see ``GridResolver.cell_at``)."""
        return self._grid.cell_at(row, column, ignore_merged=ignore_merged)

    def cells_at(
        self,
        row: Optional[int] = None,
        column: Optional[int] = None,
        ignore_merged: bool = False,
    ) -> list[AnyCell]:
        """Distinct cells overlapping a whole row or a whole column."""
        return self._grid.cells_at(row, column, ignore_merged=ignore_merged)

    def row_at(
        self,
        row: int,
        ignore_merged: bool = False,
        repeat_multi_row_cells: bool = False,
    ) -> Row:
        cells = self._grid.row_cells(
            row,
            ignore_merged=ignore_merged,
            repeat_multi_row_cells=repeat_multi_row_cells,
        )
        return Row(self, row, cells)

    def iter_rows(
        self,
        ignore_merged: bool = False,
        repeat_multi_row_cells: bool = False,
    ) -> Iterator[Row]:
        """Yield rows 1..n_rows in order.

        Args:
            ignore_merged: Decompose merged cells into their ordinary cells.
            repeat_multi_row_cells: Yield a multi-row cell in every row it
                covers instead of only the row it starts in.
        """
        for ix in range(1, self.n_rows + 1):
            yield self.row_at(
                ix,
                ignore_merged=ignore_merged,
                repeat_multi_row_cells=repeat_multi_row_cells,
            )

    def list_rows(
        self,
        ignore_merged: bool = False,
        repeat_multi_row_cells: bool = False,
    ) -> list[Row]:
        return list(
            self.iter_rows(
                ignore_merged=ignore_merged,
                repeat_multi_row_cells=repeat_multi_row_cells,
            )
        )

    def get_ocr_confidence(
        self,
        method: Union[AggregationMethod, str, None] = None,
    ) -> Optional[float]:
        """Aggregate the OCR confidence of all content in the table."""
        cells = [cell for row in self.iter_rows() for cell in row.iter_cells()]
        return _content_confidence(cells, method)

    @property
    def text(self) -> str:
        return str(self)

    def __str__(self) -> str:
        rule = "=" * 20
        row_rule = "-" * 20
        rows = [str(row) for row in self.iter_rows()]
        return "\n".join([rule, f"\n{row_rule}\n".join(rows), rule])

    def _text_at(self, row: int, column: int) -> str:
        cell = self.cell_at(row, column)
        return cell.text if cell is not None else ""

    def to_markdown(self) -> str:
        """Convert table to markdown format, repeating merged text per coordinate."""
        if not self.n_rows:
            return ""

        lines = []
        for row_ix in range(1, self.n_rows + 1):
            texts = [self._text_at(row_ix, col_ix) for col_ix in range(1, self.n_columns + 1)]
            lines.append("| " + " | ".join(texts) + " |")
            # Separator after first row (header)
            if row_ix == 1:
                lines.append("| " + " | ".join(["---"] * self.n_columns) + " |")

        return "\n".join(lines)

    def to_dict_records(self) -> list[dict]:
        """Convert table to list of dicts keyed by the first row's text."""
        if self.n_rows < 2:
            return []

        column_names = [self._text_at(1, col) for col in range(1, self.n_columns + 1)]
        records = []
        for row_ix in range(2, self.n_rows + 1):
            records.append(
                {
                    name: self._text_at(row_ix, col_ix)
                    for col_ix, name in enumerate(column_names, start=1)
                }
            )
        return records
