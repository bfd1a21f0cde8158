"""
GEB/GEBERIT Export Service

JSON, Excel and CSV downloads for a parsed DXF drawing and its
GEB/GEBERIT subset. Excel layout follows the Raumbuch export: styled
header row, one sheet per row set, 1-based "Serial No." column.
"""
import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from io import BytesIO

from apps.dxf.services.models import (
    Block,
    ClassifiedSubset,
    Entity,
    Layer,
    ParsedDocument,
)

from .flattener import collect_columns, flatten_collection, flatten_record, rows_to_csv

logger = logging.getLogger(__name__)

SERIAL_COLUMN = "Serial No."
JSON_CONTENT_TYPE = "application/json"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_CONTENT_TYPE = "text/csv; charset=utf-8"

SHEET_TITLE_INVALID_RE = re.compile(r"[\\*?:/\[\]]")
SHEET_TITLE_MAX = 31
MAX_COLUMN_WIDTH = 60
# Excel rejects longer cell text
EXCEL_CELL_MAX = 32767
TRUNCATION_MARK = "..."


def encode_json(value) -> bytes:
    """Pretty-printed UTF-8 JSON, values passed through unchanged."""
    return json.dumps(value, indent=2, default=str, ensure_ascii=False).encode("utf-8")


def safe_sheet_title(title, fallback: str = "Sheet") -> str:
    title = SHEET_TITLE_INVALID_RE.sub("-", str(title or "")).strip("'")
    return title[:SHEET_TITLE_MAX] or fallback


def _cell_value(value):
    from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        value = json.dumps(value, default=str, ensure_ascii=False)
    value = ILLEGAL_CHARACTERS_RE.sub("", str(value))
    if len(value) > EXCEL_CELL_MAX:
        value = value[: EXCEL_CELL_MAX - len(TRUNCATION_MARK)] + TRUNCATION_MARK
    return value


def _as_row(item) -> dict:
    return dict(item) if isinstance(item, Mapping) else {"Value": item}


def sheet_table(data, sheet_name: str) -> tuple[list[str], list[list]]:
    """
    Header and rows for one sheet, each row prefixed with its serial number.

    - list of mappings: one row per mapping, columns = key union
    - list of scalars: columns "Serial No." and the sheet name
    - mapping: a single row
    - anything else: columns "Serial No." and "Value"
    """
    if isinstance(data, (list, tuple)):
        if data and isinstance(data[0], Mapping):
            rows = [{SERIAL_COLUMN: i, **_as_row(item)} for i, item in enumerate(data, 1)]
            headers = collect_columns(rows)
            return headers, [[row.get(h) for h in headers] for row in rows]
        return [SERIAL_COLUMN, sheet_name], [[i, v] for i, v in enumerate(data, 1)]

    if isinstance(data, Mapping):
        row = {SERIAL_COLUMN: 1, **data}
        return list(row), [list(row.values())]

    return [SERIAL_COLUMN, "Value"], [[1, "" if data is None else str(data)]]


@dataclass(frozen=True)
class ExportArtifact:
    """A downloadable file."""

    filename: str
    content: bytes
    content_type: str


class WorkbookExportService:
    """Builds xlsx workbooks from named row sets."""

    def __init__(self):
        self._setup_styles()

    def _setup_styles(self):
        """Header styles, taken over from the Raumbuch export."""
        from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

        self.header_font = Font(bold=True, color="FFFFFF", size=11)
        self.header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
        self.header_align = Alignment(horizontal="center", vertical="center")
        self.thin_border = Border(
            left=Side(style="thin", color="B4B4B4"),
            right=Side(style="thin", color="B4B4B4"),
            top=Side(style="thin", color="B4B4B4"),
            bottom=Side(style="thin", color="B4B4B4"),
        )

    def build_workbook(self, sheets: dict) -> BytesIO:
        """
        One sheet per entry of ``sheets`` (title -> data).

        An empty mapping still yields a valid workbook with one blank sheet.
        """
        from openpyxl import Workbook

        wb = Workbook()
        ws = wb.active
        first = True

        for title, data in sheets.items():
            if not first:
                ws = wb.create_sheet()
            ws.title = safe_sheet_title(title)
            self._write_sheet(ws, data, str(title))
            first = False

        if first:
            ws.title = "Sheet1"

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output

    def _write_sheet(self, ws, data, sheet_name: str):
        from openpyxl.utils import get_column_letter

        headers, rows = sheet_table(data, sheet_name)
        widths = [len(str(h)) for h in headers]

        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=_cell_value(header))
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.header_align
            cell.border = self.thin_border

        for row_idx, values in enumerate(rows, 2):
            for col, value in enumerate(values, 1):
                value = _cell_value(value)
                ws.cell(row=row_idx, column=col, value=value)
                if value is not None:
                    widths[col - 1] = max(widths[col - 1], len(str(value)))

        for col, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = min(width + 2, MAX_COLUMN_WIDTH)
        ws.freeze_panes = "A2"


def _blank(value):
    return "" if value is None else value


def _json_or_blank(value) -> str:
    if not value:
        return ""
    return json.dumps(value, default=str, ensure_ascii=False)


def entity_sheet_row(entity: Entity) -> dict:
    row = {}
    for key in Entity.known_fields:
        if key in ("position", "center", "startPoint", "endPoint"):
            point = entity.point(key)
            for axis in ("x", "y", "z"):
                row[f"{key}_{axis}"] = _blank(point.get(axis))
        elif key == "vertices":
            row[key] = _json_or_blank(entity.get(key))
        else:
            row[key] = _blank(entity.get(key))
    row["otherProps"] = _json_or_blank(entity.other_fields)
    return row


def block_sheet_row(name: str, block: Block) -> dict:
    position = block.point("position")
    entities = block.get("entities")
    return {
        "block_name": name,
        "handle": _blank(block.get("handle")),
        "ownerHandle": _blank(block.get("ownerHandle")),
        "layer": _blank(block.get("layer")),
        "name2": _blank(block.get("name2")),
        "xrefPath": _blank(block.get("xrefPath")),
        "position_x": _blank(position.get("x")),
        "position_y": _blank(position.get("y")),
        "position_z": _blank(position.get("z")),
        "entities_count": len(entities) if isinstance(entities, list) else "",
        "otherProps": _json_or_blank(block.other_fields),
    }


def layer_sheet_row(name: str, layer: Layer, name_column: str = "layer_name") -> dict:
    row = {name_column: name}
    if name_column != "name":
        row["name"] = _blank(layer.get("name"))
    for key in ("frozen", "visible", "colorIndex", "color"):
        row[key] = _blank(layer.get(key))
    return row


def prepare_geb_sheets(subset: ClassifiedSubset) -> dict:
    """Entities/Blocks/Layers sheets of the all-elements workbook; empty ones are left out."""
    sheets = {
        "Entities": [entity_sheet_row(Entity.wrap(e)) for e in subset.entities],
        "Blocks": [block_sheet_row(name, Block.wrap(b)) for name, b in subset.blocks],
        "Layers": [layer_sheet_row(name, Layer.wrap(l)) for name, l in subset.layers],
    }
    return {title: rows for title, rows in sheets.items() if rows}


class GebExportService:
    """
    Export artifacts for one analysed drawing.

    Usage:
        service = GebExportService(document, subset)
        artifact = service.build("elements-xlsx")
        response = HttpResponse(artifact.content, content_type=artifact.content_type)
    """

    ARTIFACTS = {
        "header-json": "header_json",
        "document-json": "document_json",
        "layers-json": "layers_json",
        "layers-xlsx": "layers_excel",
        "elements-json": "elements_json",
        "elements-xlsx": "elements_excel",
        "article-codes-json": "article_codes_json",
        "article-codes-xlsx": "article_codes_excel",
        "document-csv": "document_csv",
    }

    def __init__(self, document: ParsedDocument, subset: ClassifiedSubset):
        self.document = document
        self.subset = subset
        self.workbooks = WorkbookExportService()

    @classmethod
    def artifact_names(cls) -> list[str]:
        return list(cls.ARTIFACTS)

    def build(self, name: str, **options) -> ExportArtifact:
        try:
            method = getattr(self, self.ARTIFACTS[name])
        except KeyError:
            raise ValueError(f"Unknown export artifact: {name}") from None
        artifact = method(**options)
        logger.info(f"Built {artifact.filename} ({len(artifact.content)} bytes)")
        return artifact

    def _json(self, value, filename: str) -> ExportArtifact:
        return ExportArtifact(filename, encode_json(value), JSON_CONTENT_TYPE)

    def _excel(self, sheets: dict, filename: str) -> ExportArtifact:
        return ExportArtifact(filename, self.workbooks.build_workbook(sheets).read(), XLSX_CONTENT_TYPE)

    def header_json(self) -> ExportArtifact:
        return self._json(self.document.header, "dxf-header-information.json")

    def document_json(self) -> ExportArtifact:
        return self._json(self.document.to_dict(), "dxf-parsed-data.json")

    def layers_json(self) -> ExportArtifact:
        return self._json(self.subset.layers_dict(), "geb-geberit-layers.json")

    def layers_excel(self) -> ExportArtifact:
        rows = [
            layer_sheet_row(name, Layer.wrap(layer), name_column="name")
            for name, layer in self.subset.layers
        ]
        return self._excel({"GEB-GEBERIT Layers": rows}, "geb-geberit-layers.xlsx")

    def elements_json(self) -> ExportArtifact:
        return self._json(self.subset.to_dict(), "all-geb-geberit-elements.json")

    def elements_excel(self) -> ExportArtifact:
        return self._excel(prepare_geb_sheets(self.subset), "all-geb-geberit-elements.xlsx")

    def article_codes_json(self) -> ExportArtifact:
        return self._json(self.subset.article_codes, "article-codes.json")

    def article_codes_excel(self) -> ExportArtifact:
        return self._excel({"Article Codes": self.subset.article_codes}, "article-codes.xlsx")

    def document_csv(self, scope: str = "entities") -> ExportArtifact:
        if scope == "document":
            rows = [flatten_record(self.document.to_dict())]
        else:
            rows = flatten_collection(self.document.entities, "entity")
        content = rows_to_csv(rows).encode("utf-8")
        return ExportArtifact("dxf-parsed-data.csv", content, CSV_CONTENT_TYPE)
