"""Block index and relationship resolution.

The index is built once per document over the flat block sequence and is
the single source of truth for every view. Relationship resolution is
deliberately forgiving: an ID with no matching block is logged and dropped,
so a partially redacted response still yields a usable document.
"""

import logging
from typing import Iterable, Iterator, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .base import BlockType, DocumentStructureError, RelationshipType

logger = logging.getLogger(__name__)


class ApiRelationship(BaseModel):
    """Shape check for one outgoing relationship of a block."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., alias="Type")
    ids: list[str] = Field(default_factory=list, alias="Ids")


class ApiBlock(BaseModel):
    """Shape check for one block record.

    Only the fields the model navigates by are checked. The record itself is
    never replaced by this model; validation is a gate, not a conversion.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., alias="Id")
    block_type: str = Field(..., alias="BlockType")
    confidence: Optional[float] = Field(None, alias="Confidence")
    relationships: Optional[list[ApiRelationship]] = Field(None, alias="Relationships")


def extract_blocks(response: Union[dict, Sequence]) -> list[dict]:
    """Flatten a response, a list of paginated responses, or a bare block list."""
    if isinstance(response, dict):
        if "Blocks" not in response:
            raise DocumentStructureError("Response object has no 'Blocks' list")
        blocks = response["Blocks"]
        if not isinstance(blocks, list):
            raise DocumentStructureError("Response 'Blocks' must be a list")
        return blocks

    if isinstance(response, (list, tuple)):
        if response and all(isinstance(item, dict) and "Blocks" in item for item in response):
            blocks: list[dict] = []
            for item in response:
                blocks.extend(extract_blocks(item))
            return blocks
        return list(response)

    raise DocumentStructureError(
        f"Expected a response object or a sequence of blocks, got {type(response).__name__}"
    )


class BlockIndex:
    """Mapping from block ID to the caller's block record.

    Duplicate IDs are reported (warning plus ``duplicate_ids``) and the first
    occurrence is kept.
    """

    def __init__(self, blocks: Iterable[dict]):
        self._blocks: dict[str, dict] = {}
        self.duplicate_ids: list[str] = []

        for position, block in enumerate(blocks):
            if not isinstance(block, dict):
                raise DocumentStructureError(
                    f"Block at position {position} is not a mapping: {type(block).__name__}"
                )
            try:
                ApiBlock.model_validate(block)
            except ValidationError as e:
                raise DocumentStructureError(
                    f"Block at position {position} is malformed: {e}"
                ) from e

            block_id = block["Id"]
            if block_id in self._blocks:
                logger.warning(
                    "Duplicate block ID %s at position %d ignored (first occurrence kept)",
                    block_id,
                    position,
                )
                self.duplicate_ids.append(block_id)
                continue
            self._blocks[block_id] = block

    def __len__(self) -> int:
        return len(self._blocks)

    def __contains__(self, block_id: object) -> bool:
        return block_id in self._blocks

    def __getitem__(self, block_id: str) -> dict:
        return self._blocks[block_id]

    def __iter__(self) -> Iterator[dict]:
        return iter(self._blocks.values())

    def get(self, block_id: str) -> Optional[dict]:
        return self._blocks.get(block_id)

    def blocks_of_type(self, block_type: Union[BlockType, str]) -> list[dict]:
        """All indexed blocks of one type, in input order."""
        wanted = block_type.value if isinstance(block_type, BlockType) else block_type
        return [b for b in self._blocks.values() if b["BlockType"] == wanted]


class RelationshipResolver:
    """Resolves a block's typed relationships into the blocks they name."""

    def __init__(self, index: BlockIndex):
        self.index = index

    @staticmethod
    def related_ids(block: dict, kind: Union[RelationshipType, str]) -> list[str]:
        """IDs listed under one relationship kind, in order, unresolved."""
        kind_value = kind.value if isinstance(kind, RelationshipType) else kind
        ids: list[str] = []
        for rel in block.get("Relationships") or []:
            if rel.get("Type") == kind_value:
                ids.extend(rel.get("Ids") or [])
        return ids

    def resolve(self, block: dict, kind: Union[RelationshipType, str]) -> list[dict]:
        """Blocks targeted by ``block`` under ``kind``, skipping missing IDs.

        Each missing ID produces exactly one warning and is left out of the
        result, so callers only ever see a shorter list.
        """
        resolved: list[dict] = []
        for target_id in self.related_ids(block, kind):
            target = self.index.get(target_id)
            if target is None:
                logger.warning(
                    "Block %s referenced by %s %s (%s relationship) is missing from the document",
                    target_id,
                    block.get("BlockType"),
                    block.get("Id"),
                    kind.value if isinstance(kind, RelationshipType) else kind,
                )
                continue
            resolved.append(target)
        return resolved

    def resolve_many(
        self,
        block: dict,
        kinds: Iterable[Union[RelationshipType, str]],
    ) -> list[dict]:
        """Concatenate ``resolve`` over several relationship kinds."""
        resolved: list[dict] = []
        for kind in kinds:
            resolved.extend(self.resolve(block, kind))
        return resolved
