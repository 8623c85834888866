"""Document-level views.

``Document`` is the entry point: it indexes the caller's block records once
and builds every page, and through them every line, table and form field,
exactly once. All views share the caller's dicts, so mutations made through
any view (confidence scores) are visible in the original record set.
"""

import logging
from typing import Iterator, Sequence, Union

from .base import BlockType, BlockView, RelationshipType, check_index
from .content import Line
from .form import Form
from .index import BlockIndex, RelationshipResolver, extract_blocks
from .table import Table

logger = logging.getLogger(__name__)


class Page(BlockView):
    """One PAGE block and the content it lists as children."""

    def __init__(self, block: dict, resolver: RelationshipResolver, parent_document: "Document"):
        super().__init__(block)
        self.parent_document = parent_document

        children = resolver.resolve(block, RelationshipType.CHILD)
        self._lines = [
            Line(b, resolver, self) for b in children if b["BlockType"] == BlockType.LINE.value
        ]
        self._tables = [
            Table(b, resolver, self) for b in children if b["BlockType"] == BlockType.TABLE.value
        ]
        self._form = Form(
            [b for b in children if b["BlockType"] == BlockType.KEY_VALUE_SET.value],
            resolver,
            self,
        )

    @property
    def page_number(self) -> int:
        """1-based page number, from the record or the page's position."""
        number = self._dict.get("Page")
        if number is None:
            number = self.parent_document.pages.index(self) + 1
        return number

    @property
    def lines(self) -> list[Line]:
        return list(self._lines)

    @property
    def n_lines(self) -> int:
        return len(self._lines)

    def iter_lines(self) -> Iterator[Line]:
        return iter(self._lines)

    def list_lines(self) -> list[Line]:
        return list(self._lines)

    def line_at_index(self, ix: int) -> Line:
        check_index("Line index", ix, 0, len(self._lines) - 1)
        return self._lines[ix]

    @property
    def tables(self) -> list[Table]:
        return list(self._tables)

    @property
    def n_tables(self) -> int:
        return len(self._tables)

    def iter_tables(self) -> Iterator[Table]:
        return iter(self._tables)

    def list_tables(self) -> list[Table]:
        return list(self._tables)

    def table_at_index(self, ix: int) -> Table:
        """Table by 0-based position on the page."""
        check_index("Table index", ix, 0, len(self._tables) - 1)
        return self._tables[ix]

    @property
    def form(self) -> Form:
        return self._form

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self._lines)


class Document:
    """Navigable model over an analysis response.

    Args:
        response: A response object with a ``Blocks`` list, a list of such
            objects (paginated output), or a bare list of block records.
    """

    def __init__(self, response: Union[dict, Sequence]):
        self._dict = response
        self.block_index = BlockIndex(extract_blocks(response))
        self.resolver = RelationshipResolver(self.block_index)

        self._pages = [
            Page(block, self.resolver, self)
            for block in self.block_index.blocks_of_type(BlockType.PAGE)
        ]
        logger.debug(
            "Loaded document with %d blocks across %d pages",
            len(self.block_index),
            len(self._pages),
        )

    @property
    def dict(self) -> Union[dict, Sequence]:
        """The response object supplied by the caller."""
        return self._dict

    @property
    def pages(self) -> list[Page]:
        return list(self._pages)

    @property
    def n_pages(self) -> int:
        return len(self._pages)

    def iter_pages(self) -> Iterator[Page]:
        return iter(self._pages)

    def page_number(self, page_num: int) -> Page:
        """Page by 1-based page number."""
        check_index("Page number", page_num, 1, len(self._pages))
        return self._pages[page_num - 1]

    @property
    def text(self) -> str:
        return "\n\n".join(page.text for page in self._pages)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Document(n_pages={self.n_pages})"
