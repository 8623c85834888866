"""Document model CLI - inspect analysis response files."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table as RichTable

from docmodel.config import settings
from docmodel.models import Document, DocumentModelError, DocumentStructureError, Table

app = typer.Typer(
    name="docmodel",
    help="Navigate tables, forms and text in document-analysis responses",
    add_completion=False,
)
console = Console()


def load_document(path: Path) -> Document:
    """Read a JSON response file and build the document model."""
    try:
        with open(path, encoding="utf-8") as f:
            response = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DocumentStructureError(f"{path} is not a JSON response file: {e}") from e
    return Document(response)


def grid_texts(tbl: Table, ignore_merged: bool = False, repeat_multi_row: bool = False) -> list[list[str]]:
    """Text for every coordinate of a table, one list per row.

    Merged cell text is shown once, at the first column of its span, and
    only on its first row unless ``repeat_multi_row`` is set.
    """
    rows = []
    for row_ix in range(1, tbl.n_rows + 1):
        texts = []
        for col_ix in range(1, tbl.n_columns + 1):
            cell = tbl.cell_at(row_ix, col_ix, ignore_merged=ignore_merged)
            if cell is None or col_ix != cell.column_index:
                texts.append("")
            elif row_ix != cell.row_index and not repeat_multi_row:
                texts.append("")
            else:
                texts.append(cell.text)
        rows.append(texts)
    return rows


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, help="Logging level"),
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


@app.command()
def summary(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Response JSON file"),
) -> None:
    """Summarize pages, lines, tables and form fields."""
    try:
        doc = load_document(path)
    except DocumentModelError as e:
        console.print(f"[red]Invalid response:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[bold blue]Document:[/bold blue] {path} ({doc.n_pages} pages)")
    for page in doc.iter_pages():
        tables = ", ".join(f"{t.n_rows}x{t.n_columns}" for t in page.iter_tables())
        console.print(
            f"Page {page.page_number}: {page.n_lines} lines, "
            f"{page.n_tables} tables [{tables}], {page.form.n_fields} fields"
        )


@app.command()
def table(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Response JSON file"),
    page: int = typer.Option(1, help="1-based page number"),
    index: int = typer.Option(0, help="0-based table index on the page"),
    ignore_merged: bool = typer.Option(False, help="Split merged cells"),
    repeat_multi_row: bool = typer.Option(False, help="Repeat multi-row cells in every row"),
) -> None:
    """Render one table."""
    try:
        doc = load_document(path)
        tbl = doc.page_number(page).table_at_index(index)
    except DocumentModelError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    try:
        table_type = tbl.table_type.value if tbl.table_type is not None else "none"
    except DocumentModelError as e:
        table_type = f"conflicting ({e})"

    out = RichTable(
        title=f"Table {index} on page {page} ({tbl.n_rows}x{tbl.n_columns}, type: {table_type})",
        show_header=False,
    )
    for _ in range(tbl.n_columns):
        out.add_column()
    for texts in grid_texts(tbl, ignore_merged, repeat_multi_row):
        out.add_row(*[escape(text) for text in texts])
    console.print(out)


@app.command()
def fields(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Response JSON file"),
    page: int = typer.Option(1, help="1-based page number"),
    search: Optional[str] = typer.Option(None, help="Fuzzy search on field keys"),
) -> None:
    """List form fields on a page."""
    try:
        doc = load_document(path)
        form = doc.page_number(page).form
    except DocumentModelError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    matches = form.search_fields_by_key(search) if search else form.list_fields()
    if not matches:
        console.print("[yellow]No matching fields[/yellow]")
        return
    for field in matches:
        value = field.value.text if field.value is not None else ""
        console.print(f"[bold]{escape(field.key.text)}[/bold] {escape(value)}")


if __name__ == "__main__":
    app()
