"""Tests for the JSON, Excel and CSV exports."""
import csv
import io
import json

import openpyxl
import pytest

from apps.dxf.services import ClassifiedSubset, extract_elements
from apps.export.services.export_service import (
    EXCEL_CELL_MAX,
    SERIAL_COLUMN,
    GebExportService,
    WorkbookExportService,
    _cell_value,
    safe_sheet_title,
    sheet_table,
)


def load_workbook(content: bytes):
    return openpyxl.load_workbook(io.BytesIO(content))


def sheet_rows(ws) -> list[list]:
    return [list(row) for row in ws.iter_rows(values_only=True)]


@pytest.fixture
def rich_service(rich_document, classifier):
    return GebExportService(rich_document, extract_elements(rich_document, classifier))


@pytest.fixture
def simple_service(document, classifier):
    return GebExportService(document, extract_elements(document, classifier))


class TestSheetTable:

    def test_list_of_mappings(self):
        headers, rows = sheet_table([{"a": 1}, {"b": 2, "a": 3}], "X")
        assert headers == [SERIAL_COLUMN, "a", "b"]
        assert rows == [[1, 1, None], [2, 3, 2]]

    def test_list_of_scalars_uses_sheet_name(self):
        headers, rows = sheet_table(["GEB 1", "GEB 2"], "Article Codes")
        assert headers == [SERIAL_COLUMN, "Article Codes"]
        assert rows == [[1, "GEB 1"], [2, "GEB 2"]]

    def test_single_mapping(self):
        headers, rows = sheet_table({"name": "GEB", "colorIndex": 3}, "Layer")
        assert headers == [SERIAL_COLUMN, "name", "colorIndex"]
        assert rows == [[1, "GEB", 3]]

    def test_other_value(self):
        assert sheet_table(None, "X") == ([SERIAL_COLUMN, "Value"], [[1, ""]])
        assert sheet_table(42, "X") == ([SERIAL_COLUMN, "Value"], [[1, "42"]])


class TestCellValues:

    def test_illegal_characters_removed(self):
        assert _cell_value("GEB\x01 1") == "GEB 1"

    def test_nested_values_as_json(self):
        assert _cell_value({"x": 1}) == '{"x": 1}'
        assert _cell_value([1, 2]) == "[1, 2]"

    def test_scalars_kept(self):
        assert _cell_value(None) is None
        assert _cell_value(True) is True
        assert _cell_value(2.5) == 2.5

    def test_long_text_truncated_to_excel_limit(self):
        value = _cell_value("x" * (EXCEL_CELL_MAX + 10))
        assert len(value) == EXCEL_CELL_MAX
        assert value.endswith("...")
        assert _cell_value("x" * EXCEL_CELL_MAX) == "x" * EXCEL_CELL_MAX

    def test_long_vertex_list_survives_workbook(self):
        vertices = [{"x": float(i), "y": float(i)} for i in range(2000)]
        wb = load_workbook(
            WorkbookExportService().build_workbook({"Data": [{"vertices": vertices}]}).read()
        )
        assert len(wb["Data"]["B2"].value) == EXCEL_CELL_MAX

    def test_sheet_titles(self):
        assert safe_sheet_title("a/b") == "a-b"
        assert len(safe_sheet_title("x" * 40)) == 31
        assert safe_sheet_title("") == "Sheet"


class TestWorkbookExportService:

    def test_empty_input_gives_blank_sheet(self):
        wb = load_workbook(WorkbookExportService().build_workbook({}).read())
        assert wb.sheetnames == ["Sheet1"]

    def test_header_styling(self):
        wb = load_workbook(WorkbookExportService().build_workbook({"Data": [{"a": 1}]}).read())
        header = wb["Data"]["A1"]
        assert header.value == SERIAL_COLUMN
        assert header.font.bold
        assert header.fill.start_color.rgb.endswith("1F4E79")


class TestGebExportService:

    def test_artifact_names(self):
        assert GebExportService.artifact_names() == [
            "header-json",
            "document-json",
            "layers-json",
            "layers-xlsx",
            "elements-json",
            "elements-xlsx",
            "article-codes-json",
            "article-codes-xlsx",
            "document-csv",
        ]

    def test_unknown_artifact(self, simple_service):
        with pytest.raises(ValueError):
            simple_service.build("pdf")

    def test_header_json(self, simple_service):
        artifact = simple_service.build("header-json")
        assert artifact.filename == "dxf-header-information.json"
        assert artifact.content_type == "application/json"
        assert json.loads(artifact.content) == {"$ACADVER": "AC1032", "$INSUNITS": 4}

    def test_document_json(self, simple_service, raw_document):
        artifact = simple_service.build("document-json")
        assert artifact.filename == "dxf-parsed-data.json"
        assert json.loads(artifact.content) == raw_document

    def test_elements_json(self, simple_service):
        artifact = simple_service.build("elements-json")
        assert artifact.filename == "all-geb-geberit-elements.json"
        assert json.loads(artifact.content) == {
            "entities": [
                {"type": "LINE", "handle": "1A", "layer": "GEB-PIPE", "text": "GEB123.45 valve"}
            ],
            "blocks": {},
            "layers": {},
        }

    def test_layers_json(self, rich_service):
        data = json.loads(rich_service.build("layers-json").content)
        assert list(data) == ["GEB_CODES"]
        assert data["GEB_CODES"]["color"] == 65280

    def test_article_codes_json_keeps_unicode(self, rich_service):
        artifact = rich_service.build("article-codes-json")
        assert artifact.filename == "article-codes.json"
        assert "°".encode("utf-8") in artifact.content
        assert json.loads(artifact.content) == ["GEB 111.222 °50", "Block text 1", "GEB 333"]

    def test_elements_workbook_sheets(self, rich_service):
        artifact = rich_service.build("elements-xlsx")
        assert artifact.filename == "all-geb-geberit-elements.xlsx"

        wb = load_workbook(artifact.content)
        assert wb.sheetnames == ["Entities", "Blocks", "Layers"]

        entities = sheet_rows(wb["Entities"])
        header = entities[0]
        assert header[:3] == [SERIAL_COLUMN, "type", "handle"]
        assert "position_x" in header
        assert header[-1] == "otherProps"
        assert [row[0] for row in entities[1:]] == [1, 2, 3, 4]
        assert [row[header.index("handle")] for row in entities[1:]] == ["10", "11", "12", "14"]

        insert = entities[4]
        assert json.loads(insert[header.index("otherProps")]) == {
            "attributes": [{"tag": "ART", "text": "geb-999"}]
        }

        blocks = sheet_rows(wb["Blocks"])
        assert blocks[0][:3] == [SERIAL_COLUMN, "block_name", "handle"]
        assert [row[1] for row in blocks[1:]] == ["GEBERIT_WC", "DOOR"]
        count_col = blocks[0].index("entities_count")
        assert blocks[1][count_col] == 2

        layers = sheet_rows(wb["Layers"])
        assert layers[0] == [SERIAL_COLUMN, "layer_name", "name", "frozen",
                             "visible", "colorIndex", "color"]
        assert layers[1][1] == "GEB_CODES"
        assert layers[1][5] == 3

    def test_empty_sheets_omitted(self, simple_service):
        wb = load_workbook(simple_service.build("elements-xlsx").content)
        assert wb.sheetnames == ["Entities"]

    def test_no_elements_gives_blank_workbook(self, document):
        service = GebExportService(document, ClassifiedSubset())
        wb = load_workbook(service.build("elements-xlsx").content)
        assert wb.sheetnames == ["Sheet1"]

    def test_layers_workbook(self, rich_service):
        artifact = rich_service.build("layers-xlsx")
        assert artifact.filename == "geb-geberit-layers.xlsx"
        rows = sheet_rows(load_workbook(artifact.content)["GEB-GEBERIT Layers"])
        assert rows[0] == [SERIAL_COLUMN, "name", "frozen", "visible", "colorIndex", "color"]
        assert rows[1][:2] == [1, "GEB_CODES"]

    def test_article_codes_workbook(self, rich_service):
        artifact = rich_service.build("article-codes-xlsx")
        assert artifact.filename == "article-codes.xlsx"
        rows = sheet_rows(load_workbook(artifact.content)["Article Codes"])
        assert rows == [
            [SERIAL_COLUMN, "Article Codes"],
            [1, "GEB 111.222 °50"],
            [2, "Block text 1"],
            [3, "GEB 333"],
        ]

    def test_entities_csv(self, simple_service):
        artifact = simple_service.build("document-csv")
        assert artifact.filename == "dxf-parsed-data.csv"
        assert artifact.content_type.startswith("text/csv")

        rows = list(csv.reader(io.StringIO(artifact.content.decode("utf-8"))))
        assert rows[0][:4] == [
            "entity[0].type", "entity[0].handle", "entity[0].layer", "entity[0].text",
        ]
        assert len(rows) == 3
        assert rows[1][:4] == ["LINE", "1A", "GEB-PIPE", "GEB123.45 valve"]
        assert rows[2][:4] == ["", "", "", ""]

    def test_document_csv(self, simple_service):
        artifact = simple_service.build("document-csv", scope="document")
        rows = list(csv.reader(io.StringIO(artifact.content.decode("utf-8"))))
        assert len(rows) == 2
        assert "header.$ACADVER" in rows[0]
        assert rows[1][rows[0].index("header.$ACADVER")] == "AC1032"
