"""A small spreadsheet workbook that is saved as an .xlsx file."""

from __future__ import annotations

import re
import zipfile
from typing import Any, Iterable, Sequence
from xml.sax.saxutils import escape

_LETTERS = 26
_MAX_SHEET_NAME = 31
_INVALID_SHEET_CHARS = set("[]:*?/\\")
_CELL_RE = re.compile(r"^([A-Z]+)([1-9][0-9]*)$")
_CONTROL_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f]")

_NS_MAIN = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
_NS_REL = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
_NS_PKG_REL = "http://schemas.openxmlformats.org/package/2006/relationships"
_NS_CT = "http://schemas.openxmlformats.org/package/2006/content-types"
_REL_DOC = _NS_REL + "/officeDocument"
_REL_SHEET = _NS_REL + "/worksheet"
_REL_STYLES = _NS_REL + "/styles"
_CT_SHEET = "application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"
_CT_BOOK = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet.main+xml"
_CT_STYLES = "application/vnd.openxmlformats-officedocument.spreadsheetml.styles+xml"
_HEADER = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

_STYLES = (
    _HEADER
    + f'<styleSheet xmlns="{_NS_MAIN}">'
    '<fonts count="1"><font><sz val="11"/><name val="Calibri"/></font></fonts>'
    '<fills count="2"><fill><patternFill patternType="none"/></fill>'
    '<fill><patternFill patternType="gray125"/></fill></fills>'
    '<borders count="1"><border><left/><right/><top/><bottom/><diagonal/></border></borders>'
    '<cellStyleXfs count="1"><xf numFmtId="0" fontId="0" fillId="0" borderId="0"/></cellStyleXfs>'
    '<cellXfs count="1"><xf numFmtId="0" fontId="0" fillId="0" borderId="0" xfId="0"/></cellXfs>'
    "</styleSheet>"
)


def column_name(index: int) -> str:
    """Spreadsheet column letters for a zero-based index: 0 is A, 26 is AA."""
    if index < 0:
        raise ValueError(f"column index must not be negative: {index}")
    if index < _LETTERS:
        return chr(ord("A") + index)
    return column_name(index // _LETTERS - 1) + chr(ord("A") + index % _LETTERS)


def cell_name(column: str, row: int) -> str:
    """Cell reference such as ``A1`` from column letters and a 1-based row."""
    return f"{column}{row}"


def _column_index(letters: str) -> int:
    index = 0
    for char in letters:
        index = index * _LETTERS + (ord(char) - ord("A") + 1)
    return index - 1


def _check_sheet_name(name: str) -> None:
    if not name or len(name) > _MAX_SHEET_NAME:
        raise ValueError(f"sheet name must be 1-{_MAX_SHEET_NAME} characters: {name!r}")
    if _INVALID_SHEET_CHARS.intersection(name):
        raise ValueError(f"sheet name holds an invalid character: {name!r}")


def _xml_text(value: str) -> str:
    return escape(_CONTROL_RE.sub("", value))


def _xml_attr(value: str) -> str:
    return escape(_CONTROL_RE.sub("", value), {'"': "&quot;"})


def _cell_xml(ref: str, value: Any) -> str:
    if isinstance(value, bool):
        return f'<c r="{ref}" t="b"><v>{int(value)}</v></c>'
    if isinstance(value, (int, float)):
        return f'<c r="{ref}"><v>{value!r}</v></c>'
    text = _xml_text(str(value))
    return f'<c r="{ref}" t="inlineStr"><is><t xml:space="preserve">{text}</t></is></c>'


class Workbook:
    """Named sheets of cells; a new workbook holds one empty ``Sheet1``."""

    def __init__(self) -> None:
        self._sheets: dict[str, dict[tuple[int, int], Any]] = {"Sheet1": {}}
        self._active = "Sheet1"

    @property
    def sheet_names(self) -> list[str]:
        return list(self._sheets)

    @property
    def active_sheet(self) -> str:
        return self._active

    def cell_value(self, sheet: str, ref: str) -> Any:
        """Value of a cell such as ``B2``, or ``None`` when it is empty."""
        match = _CELL_RE.match(ref)
        if match is None:
            raise ValueError(f"invalid cell reference: {ref!r}")
        cells = self._sheets[sheet]
        return cells.get((int(match.group(2)), _column_index(match.group(1))))

    def add_sheet(self, name: str, headers: Sequence[Any], rows: Iterable[Sequence[Any]]) -> None:
        """Write a header row and data rows below it, creating the sheet if needed."""
        _check_sheet_name(name)
        cells = self._sheets.setdefault(name, {})
        width = len(headers)
        for column, header in enumerate(headers):
            cells[(1, column)] = header
        for row_number, row in enumerate(rows, start=2):
            for column in range(width):
                value = row[column] if column < len(row) else None
                if value is None:
                    cells.pop((row_number, column), None)
                else:
                    cells[(row_number, column)] = value
        self._active = name

    def remove_sheet(self, name: str) -> None:
        """Remove a sheet; a missing name or the only remaining sheet is left alone."""
        if name not in self._sheets or len(self._sheets) == 1:
            return
        del self._sheets[name]
        if self._active == name:
            self._active = next(iter(self._sheets))

    def _sheet_xml(self, cells: dict[tuple[int, int], Any]) -> str:
        rows: dict[int, list[tuple[int, Any]]] = {}
        for (row, column), value in sorted(cells.items()):
            rows.setdefault(row, []).append((column, value))
        body = "".join(
            f'<row r="{row}">'
            + "".join(_cell_xml(cell_name(column_name(col), row), value) for col, value in values)
            + "</row>"
            for row, values in rows.items()
        )
        return _HEADER + f'<worksheet xmlns="{_NS_MAIN}"><sheetData>{body}</sheetData></worksheet>'

    def save(self, path: str) -> None:
        """Write the workbook to ``path`` as an .xlsx file."""
        names = self.sheet_names
        active = names.index(self._active)
        count = len(names)
        content_types = (
            _HEADER
            + f'<Types xmlns="{_NS_CT}">'
            '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
            '<Default Extension="xml" ContentType="application/xml"/>'
            f'<Override PartName="/xl/workbook.xml" ContentType="{_CT_BOOK}"/>'
            f'<Override PartName="/xl/styles.xml" ContentType="{_CT_STYLES}"/>'
            + "".join(
                f'<Override PartName="/xl/worksheets/sheet{i}.xml" ContentType="{_CT_SHEET}"/>'
                for i in range(1, count + 1)
            )
            + "</Types>"
        )
        root_rels = (
            _HEADER
            + f'<Relationships xmlns="{_NS_PKG_REL}">'
            f'<Relationship Id="rId1" Type="{_REL_DOC}" Target="xl/workbook.xml"/>'
            "</Relationships>"
        )
        workbook = (
            _HEADER
            + f'<workbook xmlns="{_NS_MAIN}" xmlns:r="{_NS_REL}">'
            f'<bookViews><workbookView activeTab="{active}"/></bookViews><sheets>'
            + "".join(
                f'<sheet name="{_xml_attr(name)}" sheetId="{i}" r:id="rId{i}"/>'
                for i, name in enumerate(names, start=1)
            )
            + "</sheets></workbook>"
        )
        book_rels = (
            _HEADER
            + f'<Relationships xmlns="{_NS_PKG_REL}">'
            + "".join(
                f'<Relationship Id="rId{i}" Type="{_REL_SHEET}" Target="worksheets/sheet{i}.xml"/>'
                for i in range(1, count + 1)
            )
            + f'<Relationship Id="rId{count + 1}" Type="{_REL_STYLES}" Target="styles.xml"/>'
            "</Relationships>"
        )
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as archive:
            archive.writestr("[Content_Types].xml", content_types)
            archive.writestr("_rels/.rels", root_rels)
            archive.writestr("xl/workbook.xml", workbook)
            archive.writestr("xl/_rels/workbook.xml.rels", book_rels)
            archive.writestr("xl/styles.xml", _STYLES)
            for i, name in enumerate(names, start=1):
                archive.writestr(f"xl/worksheets/sheet{i}.xml", self._sheet_xml(self._sheets[name]))


def export_excel(
    sheet_name: str,
    headers: Sequence[Any],
    rows: Iterable[Sequence[Any]],
    workbook: Workbook,
) -> Workbook:
    """Write a table into ``workbook`` as the active sheet and return it."""
    workbook.add_sheet(sheet_name, headers, rows)
    return workbook