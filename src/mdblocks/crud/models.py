"""Document store state and the block metadata surface returned to callers"""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mdblocks.core.models import Block, BlockType
from mdblocks.core.utils.hashing import hex_digest


@dataclass
class DocumentData:
    """Internal per-document state; never leaves the store."""
    doc_id:   str
    path:     str
    blocks:   list[Block] = field(default_factory=list)
    dirty:    bool = False
    revision: int = 0           # bumped on every mutation

    def touch(self) -> None:
        """Mark the document as changed since the last save."""
        self.dirty = True
        self.revision += 1

    def reindex(self) -> None:
        """Renumber block ids to 0..len in array order."""
        for i, block in enumerate(self.blocks):
            block.id = i


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class BlockMeta(CamelModel):
    """Block metadata without the markdown body."""
    id:           int
    start_line:   int
    end_line:     int
    content_hash: str               # lowercase hex of the FNV-1a hash
    block_type:   BlockType
    line_count:   int
    row_count:    Optional[int] = None
    col_count:    Optional[int] = None

    @classmethod
    def from_block(cls, block: Block) -> "BlockMeta":
        return cls(
            id=block.id,
            start_line=block.start_line,
            end_line=block.end_line,
            content_hash=hex_digest(block.content_hash),
            block_type=block.block_type,
            line_count=block.line_count,
            row_count=block.row_count,
            col_count=block.col_count,
        )


class DocumentHandle(CamelModel):
    """Returned by open_document."""
    doc_id:       str
    path:         str
    total_blocks: int
    blocks:       list[BlockMeta]


class BlockContent(CamelModel):
    """Block with its markdown body, returned by get_blocks."""
    id:       int
    markdown: str


class BlockUpdate(CamelModel):
    """In-place content edit for one block; accepts ``id`` or ``blockId``."""
    id:       int = Field(validation_alias=AliasChoices("id", "blockId"))
    markdown: str


class WindowUpdateResult(CamelModel):
    """Result of splicing a re-scanned window back into the document."""
    new_total_blocks: int
    blocks:           list[BlockMeta]


class BlockSearchMatch(CamelModel):
    block_id:   int
    start_line: int
    match_text: str
