"""Two-dimensional grid over a table's ordinary and merged cells.

Coordinates are 1-based. Every ordinary cell is registered at its single
coordinate; every merged cell is registered at each coordinate of its
rectangle, always as the same instance, so lookups anywhere inside one merge
return an identical object.

Overlapping merges are not supported input. When they occur the merge
listed first in the table's relationships owns the shared coordinates;
likewise the first ordinary cell listed wins a contested coordinate.
"""

import logging
from typing import Any, Callable, Optional, Sequence

from .base import check_index

logger = logging.getLogger(__name__)


class GridResolver:
    """Position index over one table's cells.

    Args:
        cells: Ordinary cells, each occupying one coordinate.
        merged_cells: Merged cells, each occupying a rectangular span.
        placeholder_factory: Called with ``(row, column)`` to create the
            empty stand-in returned when merges are ignored and no ordinary
            cell exists at a coordinate. Called at most once per coordinate.
    """

    def __init__(
        self,
        cells: Sequence[Any],
        merged_cells: Sequence[Any],
        placeholder_factory: Callable[[int, int], Any],
    ):
        self._placeholder_factory = placeholder_factory
        self._placeholders: dict[tuple[int, int], Any] = {}

        self.n_rows = max(
            [c.row_index for c in cells]
            + [m.row_index + m.row_span - 1 for m in merged_cells],
            default=0,
        )
        self.n_columns = max(
            [c.column_index for c in cells]
            + [m.column_index + m.column_span - 1 for m in merged_cells],
            default=0,
        )

        self._ordinary: dict[tuple[int, int], Any] = {}
        for cell in cells:
            coord = (cell.row_index, cell.column_index)
            if coord in self._ordinary:
                logger.debug("Cell %r shadowed at %s by an earlier cell", cell, coord)
                continue
            self._ordinary[coord] = cell

        self._merged: dict[tuple[int, int], Any] = {}
        for merged in merged_cells:
            for row in range(merged.row_index, merged.row_index + merged.row_span):
                for col in range(merged.column_index, merged.column_index + merged.column_span):
                    if (row, col) in self._merged:
                        logger.debug(
                            "Merged cell %r overlaps an earlier merge at %s", merged, (row, col)
                        )
                        continue
                    self._merged[(row, col)] = merged

    def _check_row(self, row: int) -> None:
        check_index("Row index", row, 1, self.n_rows)

    def _check_column(self, column: int) -> None:
        check_index("Column index", column, 1, self.n_columns)

    def _placeholder(self, row: int, column: int) -> Any:
        placeholder = self._placeholders.get((row, column))
        if placeholder is None:
            placeholder = self._placeholder_factory(row, column)
            self._placeholders[(row, column)] = placeholder
        return placeholder

    def cell_at(self, row: int, column: int, ignore_merged: bool = False):
        """Look up the cell at one coordinate.

        With ``ignore_merged`` false a coordinate inside a merge yields the
        merged cell; a coordinate with nothing registered yields ``None``.
        With ``ignore_merged`` true the ordinary cell is returned, or an
        empty placeholder if none was resolved there.
        """
        self._check_row(row)
        self._check_column(column)
        coord = (row, column)

        if ignore_merged:
            cell = self._ordinary.get(coord)
            return cell if cell is not None else self._placeholder(row, column)

        merged = self._merged.get(coord)
        if merged is not None:
            return merged
        return self._ordinary.get(coord)

    def cells_at(
        self,
        row: Optional[int] = None,
        column: Optional[int] = None,
        ignore_merged: bool = False,
    ) -> list:
        """Distinct cells overlapping one row or one column.

        Exactly one of ``row`` and ``column`` must be given; the other acts as
        a wildcard. Merged cells appear once however many coordinates of the
        slice they cover, unless ``ignore_merged`` decomposes them.
        """
        if (row is None) == (column is None):
            raise ValueError("Exactly one of row and column must be specified")

        if row is not None:
            self._check_row(row)
            coords = [(row, col) for col in range(1, self.n_columns + 1)]
        else:
            self._check_column(column)
            coords = [(r, column) for r in range(1, self.n_rows + 1)]

        result = []
        seen: set[int] = set()
        for r, c in coords:
            cell = self.cell_at(r, c, ignore_merged=ignore_merged)
            if cell is None or id(cell) in seen:
                continue
            seen.add(id(cell))
            result.append(cell)
        return result

    def row_cells(
        self,
        row: int,
        ignore_merged: bool = False,
        repeat_multi_row_cells: bool = False,
    ) -> list:
        """Cells of one row as seen by row iteration.

        Without ``repeat_multi_row_cells`` a cell belongs only to the row
        holding its top-left coordinate.
        """
        cells = self.cells_at(row, None, ignore_merged=ignore_merged)
        if repeat_multi_row_cells:
            return cells
        return [c for c in cells if c.row_index == row]
