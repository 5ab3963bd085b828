"""
Document Extractor
==================
Turns uploaded file bytes into plain text, dispatching on the file extension.
"""

import io
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

logger = structlog.get_logger()

# Number of decoded characters inspected when probing an unknown file type
PROBE_SAMPLE_SIZE = 1000


class DocumentKind(str, Enum):
    """Extraction strategy selected for a file."""

    TEXT = "text"
    PDF = "pdf"
    WORD = "word"
    SPREADSHEET = "spreadsheet"
    LEGACY_SPREADSHEET = "legacy_spreadsheet"
    PROBE = "probe"


EXTENSION_KINDS: dict[str, DocumentKind] = {
    **{
        ext: DocumentKind.TEXT
        for ext in (
            "txt", "md", "json", "js", "ts", "jsx", "tsx", "py", "java",
            "c", "cpp", "h", "css", "html", "xml", "yaml", "yml", "sql",
            "sh", "rb", "go", "rs", "csv", "tsv", "toml", "ini", "cfg",
            "log", "rst",
        )
    },
    "pdf": DocumentKind.PDF,
    "doc": DocumentKind.WORD,
    "docx": DocumentKind.WORD,
    "xlsx": DocumentKind.SPREADSHEET,
    "xlsm": DocumentKind.SPREADSHEET,
    "xls": DocumentKind.LEGACY_SPREADSHEET,
}


@dataclass(frozen=True)
class ParsedDocument:
    """
    Result of extracting one file.

    ``error`` and ``text`` are mutually exclusive: a failed extraction always
    carries empty text.
    """

    text: str
    file_name: str
    file_type: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class UnsupportedFileType(Exception):
    """Raised by the probe strategy when content does not look like text."""


def file_extension(file_name: str) -> str:
    """Lowercased suffix after the last dot, or an empty string."""
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[1].lower()


def document_kind(extension: str) -> DocumentKind:
    return EXTENSION_KINDS.get(extension, DocumentKind.PROBE)


def _decode_text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _extract_pdf(data: bytes) -> str:
    import fitz  # PyMuPDF

    with fitz.open(stream=data, filetype="pdf") as doc:
        pages = [page.get_text() for page in doc]
    return "\n\n".join(pages)


def _extract_word(data: bytes) -> str:
    from docx import Document
    from docx.oxml.ns import qn
    from docx.table import Table
    from docx.text.paragraph import Paragraph

    document = Document(io.BytesIO(data))
    parts: list[str] = []

    # Walk the body so paragraphs and tables keep their document order
    for child in document.element.body.iterchildren():
        if child.tag == qn("w:p"):
            parts.append(Paragraph(child, document).text)
        elif child.tag == qn("w:tbl"):
            table = Table(child, document)
            for row in table.rows:
                parts.append("\t".join(cell.text for cell in row.cells))

    return "\n".join(parts)


def _format_cell(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def _render_rows(rows) -> str:
    lines = ["\t".join(_format_cell(value) for value in row) for row in rows]
    # Trailing empty rows carry no content
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def _extract_spreadsheet(data: bytes) -> str:
    from openpyxl import load_workbook

    workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    try:
        sheets = [
            _render_rows(sheet.iter_rows(values_only=True))
            for sheet in workbook.worksheets
        ]
    finally:
        workbook.close()
    return "\n\n".join(sheets)


def _extract_legacy_spreadsheet(data: bytes) -> str:
    import xlrd

    workbook = xlrd.open_workbook(file_contents=data)
    sheets = []
    for sheet in workbook.sheets():
        rows = (sheet.row_values(index) for index in range(sheet.nrows))
        sheets.append(_render_rows(rows))
    return "\n\n".join(sheets)


def _is_probably_text(sample: str) -> bool:
    for char in sample:
        code = ord(char)
        if char in "\t\n\r":
            continue
        if 0x20 <= code <= 0x7E or code >= 0xA0:
            continue
        return False
    return True


def _probe_text(data: bytes) -> str:
    text = _decode_text(data)
    sample = text[:PROBE_SAMPLE_SIZE]
    if "\x00" in sample or not _is_probably_text(sample):
        raise UnsupportedFileType()
    return text


STRATEGIES: dict[DocumentKind, Callable[[bytes], str]] = {
    DocumentKind.TEXT: _decode_text,
    DocumentKind.PDF: _extract_pdf,
    DocumentKind.WORD: _extract_word,
    DocumentKind.SPREADSHEET: _extract_spreadsheet,
    DocumentKind.LEGACY_SPREADSHEET: _extract_legacy_spreadsheet,
    DocumentKind.PROBE: _probe_text,
}


def extract(data: bytes, file_name: str) -> ParsedDocument:
    """
    Extract plain text from a file.

    Never raises: unsupported content and parser failures are returned as a
    ParsedDocument with ``error`` set and empty text.
    """
    file_type = file_extension(file_name)
    kind = document_kind(file_type)

    try:
        text = STRATEGIES[kind](data)
    except UnsupportedFileType:
        logger.warning("Unsupported file type", file_name=file_name, file_type=file_type)
        return ParsedDocument(
            text="",
            file_name=file_name,
            file_type=file_type,
            error=f"Unsupported file type: {file_type}",
        )
    except Exception as e:
        logger.warning("Failed to parse file", file_name=file_name, kind=kind.value, error=str(e))
        return ParsedDocument(
            text="",
            file_name=file_name,
            file_type=file_type,
            error=f"Failed to parse {file_name}: {e}",
        )

    return ParsedDocument(text=text, file_name=file_name, file_type=file_type)
