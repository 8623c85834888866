"""Text content views: words, lines and selection elements."""

from typing import Iterator, Optional, Union

from .base import (
    AggregationMethod,
    BlockType,
    BlockView,
    RelationshipType,
    SelectionStatus,
    aggregate,
    check_index,
)
from .index import RelationshipResolver


class Word(BlockView):
    """A single recognized word."""

    def __init__(self, block: dict, parent: Optional[object] = None):
        super().__init__(block)
        self.parent = parent

    @property
    def text_type(self) -> Optional[str]:
        return self._dict.get("TextType")


class SelectionElement(BlockView):
    """A checkbox or radio button."""

    def __init__(self, block: dict, parent: Optional[object] = None):
        super().__init__(block)
        self.parent = parent

    @property
    def selection_status(self) -> Optional[str]:
        return self._dict.get("SelectionStatus")

    @property
    def is_selected(self) -> bool:
        return self.selection_status == SelectionStatus.SELECTED.value

    @property
    def text(self) -> str:
        return "[X]" if self.is_selected else "[ ]"


Content = Union[Word, SelectionElement, BlockView]


def wrap_content(block: dict, parent: Optional[object] = None) -> Content:
    """Wrap a content block in the view matching its type.

    Unknown block types fall back to a generic ``BlockView`` rather than
    raising, so new record kinds degrade to "opaque content".
    """
    block_type = block.get("BlockType")
    if block_type == BlockType.WORD.value:
        return Word(block, parent)
    if block_type == BlockType.SELECTION_ELEMENT.value:
        return SelectionElement(block, parent)
    return BlockView(block)


def join_text(items) -> str:
    """Join the non-empty texts of ``items`` with single spaces."""
    return " ".join(t for t in (item.text for item in items) if t)


class Line(BlockView):
    """A line of text and the words that make it up."""

    def __init__(self, block: dict, resolver: RelationshipResolver, parent_page=None):
        super().__init__(block)
        self.parent_page = parent_page
        self._words = [
            Word(b, self)
            for b in resolver.resolve(block, RelationshipType.CHILD)
            if b["BlockType"] == BlockType.WORD.value
        ]

    @property
    def words(self) -> list[Word]:
        return list(self._words)

    @property
    def n_words(self) -> int:
        return len(self._words)

    def iter_words(self) -> Iterator[Word]:
        return iter(self._words)

    def list_words(self) -> list[Word]:
        return list(self._words)

    def word_at_index(self, ix: int) -> Word:
        check_index("Word index", ix, 0, len(self._words) - 1)
        return self._words[ix]

    @property
    def text(self) -> str:
        # LINE records carry their own text; fall back to the words
        return self._dict.get("Text") or join_text(self._words)

    def get_ocr_confidence(
        self,
        method: Union[AggregationMethod, str, None] = None,
    ) -> Optional[float]:
        """Aggregate the OCR confidence of this line's words."""
        scores = [w.confidence for w in self._words if w.confidence is not None]
        if not scores:
            return None
        return aggregate(scores, method)
