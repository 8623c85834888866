"""Pytest configuration and fixtures.

Responses are built in memory with ``ResponseBuilder`` so each test gets a
fresh, independently mutable record set.
"""

import pytest


class ResponseBuilder:
    """Assemble a single-page analysis response block by block."""

    def __init__(self):
        self.blocks: list[dict] = []
        self._counter = 0
        self.page = self.add_block("PAGE", None, Page=1)
        self.page["Relationships"] = [{"Type": "CHILD", "Ids": []}]

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix.lower()}-{self._counter:04d}"

    def _next_confidence(self) -> float:
        # Deterministic spread of scores in (80, 100)
        return round(80.0 + (self._counter * 7.3) % 19.9, 3)

    def add_block(self, block_type: str, confidence=0.0, **fields) -> dict:
        block = {
            "BlockType": block_type,
            "Id": self._next_id(block_type),
            "Geometry": {
                "BoundingBox": {"Width": 0.1, "Height": 0.02, "Left": 0.05, "Top": 0.1},
                "Polygon": [
                    {"X": 0.05, "Y": 0.1},
                    {"X": 0.15, "Y": 0.1},
                    {"X": 0.15, "Y": 0.12},
                    {"X": 0.05, "Y": 0.12},
                ],
            },
        }
        if confidence is not None:
            block["Confidence"] = confidence or self._next_confidence()
        block.update(fields)
        self.blocks.append(block)
        return block

    def add_page_child(self, block_id: str) -> None:
        self.page["Relationships"][0]["Ids"].append(block_id)

    def words(self, text: str) -> list[str]:
        return [
            self.add_block("WORD", Text=token, TextType="PRINTED")["Id"]
            for token in text.split()
        ]

    def line(self, text: str) -> str:
        word_ids = self.words(text)
        block = self.add_block(
            "LINE", Text=text, Relationships=[{"Type": "CHILD", "Ids": word_ids}]
        )
        self.add_page_child(block["Id"])
        return block["Id"]

    def cell(self, row: int, col: int, text: str = "", entity_types=None) -> str:
        fields = {"RowIndex": row, "ColumnIndex": col, "RowSpan": 1, "ColumnSpan": 1}
        word_ids = self.words(text)
        if word_ids:
            fields["Relationships"] = [{"Type": "CHILD", "Ids": word_ids}]
        if entity_types:
            fields["EntityTypes"] = list(entity_types)
        return self.add_block("CELL", **fields)["Id"]

    def merged_cell(self, row: int, col: int, row_span: int, col_span: int, cell_ids) -> str:
        return self.add_block(
            "MERGED_CELL",
            RowIndex=row,
            ColumnIndex=col,
            RowSpan=row_span,
            ColumnSpan=col_span,
            Relationships=[{"Type": "CHILD", "Ids": list(cell_ids)}],
        )["Id"]

    def table(self, cell_ids, merged_ids=(), entity_types=("STRUCTURED_TABLE",)) -> str:
        relationships = [{"Type": "CHILD", "Ids": list(cell_ids)}]
        if merged_ids:
            relationships.append({"Type": "MERGED_CELL", "Ids": list(merged_ids)})
        fields = {"Relationships": relationships}
        if entity_types:
            fields["EntityTypes"] = list(entity_types)
        block = self.add_block("TABLE", **fields)
        self.add_page_child(block["Id"])
        return block["Id"]

    def field(self, key: str, value: str) -> str:
        value_block = self.add_block(
            "KEY_VALUE_SET",
            EntityTypes=["VALUE"],
            Relationships=[{"Type": "CHILD", "Ids": self.words(value)}],
        )
        key_block = self.add_block(
            "KEY_VALUE_SET",
            EntityTypes=["KEY"],
            Relationships=[
                {"Type": "VALUE", "Ids": [value_block["Id"]]},
                {"Type": "CHILD", "Ids": self.words(key)},
            ],
        )
        self.add_page_child(key_block["Id"])
        self.add_page_child(value_block["Id"])
        return key_block["Id"]

    def build(self) -> dict:
        return {"DocumentMetadata": {"Pages": 1}, "Blocks": self.blocks}


EMPLOYMENT_ROWS = [
    ["Start Date", "End Date", "Employer Name", "Position Held", "Reason for leaving"],
    ["1/15/2009", "6/30/2011", "Any Company", "Assistant Baker", "Family relocated"],
    ["7/1/2011", "8/10/2013", "Example Corp.", "Baker", "Better opportunity"],
    ["Payment - Utility", "8/15/2013", "AnyCompany", "Head Baker", "N/A, current"],
]


@pytest.fixture
def builder():
    """A fresh response builder."""
    return ResponseBuilder()


@pytest.fixture
def simple_response():
    """One page: two lines, four form fields and a 4x5 structured table."""
    b = ResponseBuilder()
    b.line("Employment Application")
    b.line("Applicant Information")
    b.field("Full Name:", "Jane Doe")
    b.field("Phone Number:", "555-0100")
    b.field("Home Address:", "123 Any Street, Any Town, USA")
    b.field("Date of Birth:", "01/01/1990")

    cell_ids = []
    for row_ix, row in enumerate(EMPLOYMENT_ROWS, start=1):
        for col_ix, text in enumerate(row, start=1):
            entity_types = ["COLUMN_HEADER"] if row_ix == 1 else None
            cell_ids.append(b.cell(row_ix, col_ix, text, entity_types))
    b.table(cell_ids)
    return b.build()


@pytest.fixture
def merged_response():
    """One page holding a 6x5 table with horizontal and vertical merges.

    Layout (M = merged):
        row 1: five header cells
        row 2: M(2,1 x4) "Previous Balance" | amount
        rows 3-4: M(3,1 rows 3-4) "2022-01-01" | four cells each
        row 5: five cells
        row 6: M(6,1 x4) "Closing Balance" | amount
    """
    b = ResponseBuilder()
    cells: dict[tuple[int, int], str] = {}

    for col, text in enumerate(["Date", "Description", "Reference", "Status", "Amount"], start=1):
        cells[(1, col)] = b.cell(1, col, text, ["COLUMN_HEADER"])

    for col, text in enumerate(["Previous", "Balance", "", "", "$100.00"], start=1):
        cells[(2, col)] = b.cell(2, col, text)

    cells[(3, 1)] = b.cell(3, 1, "")
    for col, text in enumerate(["Payment", "REF-1", "Cleared", "$20.00"], start=2):
        cells[(3, col)] = b.cell(3, col, text)
    cells[(4, 1)] = b.cell(4, 1, "2022-01-01")
    for col, text in enumerate(["Refund", "REF-2", "Pending", "$5.00"], start=2):
        cells[(4, col)] = b.cell(4, col, text)

    for col, text in enumerate(["2022-01-15", "Fee", "REF-3", "Cleared", "$-5.00"], start=1):
        cells[(5, col)] = b.cell(5, col, text)

    for col, text in enumerate(["Closing", "Balance", "", "", "$85.00"], start=1):
        cells[(6, col)] = b.cell(6, col, text)

    merged_ids = [
        b.merged_cell(2, 1, 1, 4, [cells[(2, c)] for c in range(1, 5)]),
        b.merged_cell(3, 1, 2, 1, [cells[(3, 1)], cells[(4, 1)]]),
        b.merged_cell(6, 1, 1, 4, [cells[(6, c)] for c in range(1, 5)]),
    ]
    b.table(list(cells.values()), merged_ids)
    return b.build()
