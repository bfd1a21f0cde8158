"""Shared fixtures: sample documents and ezdxf-built DXF files."""
import io

import ezdxf
import pytest
from django.core.cache import cache

from apps.dxf.services import ParsedDocument, PatternClassifier


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def classifier():
    return PatternClassifier(["GEB", "GEBERIT"])


@pytest.fixture
def raw_document():
    return {
        "header": {"$ACADVER": "AC1032", "$INSUNITS": 4},
        "entities": [
            {"type": "LINE", "handle": "1A", "layer": "GEB-PIPE", "text": "GEB123.45 valve"},
            {"type": "TEXT", "handle": "1B", "layer": "0", "text": "unrelated"},
        ],
        "blocks": {},
        "tables": {"layer": {"layers": {}}},
    }


@pytest.fixture
def document(raw_document):
    return ParsedDocument.from_dict(raw_document)


@pytest.fixture
def rich_document():
    """Entities, blocks and layers with and without GEB references."""
    return ParsedDocument.from_dict({
        "header": {"$ACADVER": "AC1027"},
        "entities": [
            {
                "type": "MTEXT",
                "handle": "10",
                "layer": "GEB_CODES",
                "text": "{\\fArial|b0|i0|c0|p34;GEB 111.222}\\P%%C50",
                "position": {"x": 1.0, "y": 2.0, "z": 0.0},
            },
            {"type": "TEXT", "handle": "11", "layer": "GEB_CODES", "text": "GEB 111.222 %%C50"},
            {"type": "TEXT", "handle": "12", "layer": "WALLS", "text": "Geberit Duofix"},
            {"type": "CIRCLE", "handle": "13", "layer": "WALLS", "radius": 2.5,
             "center": {"x": 0, "y": 0, "z": 0}},
            {"type": "INSERT", "handle": "14", "layer": "0", "name": "WC",
             "attributes": [{"tag": "ART", "text": "geb-999"}]},
        ],
        "blocks": {
            "GEBERIT_WC": {
                "name": "GEBERIT_WC",
                "layer": "0",
                "text": "Block text 1",
                "position": {"x": 0, "y": 0, "z": 0},
                "entities": [
                    {"type": "TEXT", "layer": "GEB_CODES", "text": "GEB 333"},
                    {"type": "TEXT", "layer": "0", "text": "GEB ignored"},
                ],
            },
            "DOOR": {
                "name": "DOOR",
                "layer": "0",
                "entities": [{"type": "LINE", "layer": "0", "lineType": "GEB_DASHED"}],
            },
            "CHAIR": {"name": "CHAIR", "layer": "0", "entities": []},
        },
        "tables": {
            "layer": {
                "layers": {
                    "GEB_CODES": {"name": "GEB_CODES", "frozen": False, "visible": True,
                                  "colorIndex": 3, "color": 65280},
                    "WALLS": {"name": "WALLS", "frozen": True, "visible": False,
                              "colorIndex": 1, "color": 16711680},
                    "0": {"name": "0", "frozen": False, "visible": True,
                          "colorIndex": 7, "color": 16777215},
                }
            }
        },
    })


def build_dxf_text() -> str:
    doc = ezdxf.new("R2010")
    doc.layers.add("GEB-PIPE", color=3)
    doc.layers.add("WALLS", color=1)

    msp = doc.modelspace()
    msp.add_line((0, 0), (10, 0), dxfattribs={"layer": "GEB-PIPE"})
    msp.add_text("GEB123.45 valve", dxfattribs={"layer": "GEB-PIPE", "height": 2.5})
    msp.add_mtext(
        "{\\fArial|b0|i0|c0|p34;GEB 9876}\\PWC", dxfattribs={"layer": "GEB-PIPE"}
    )
    msp.add_circle((5, 5), 2, dxfattribs={"layer": "WALLS"})
    msp.add_text("unrelated", dxfattribs={"layer": "WALLS"})

    block = doc.blocks.new(name="GEBERIT_WC")
    block.add_text("GEB 111.222", dxfattribs={"layer": "GEB-PIPE"})
    block.add_line((0, 0), (1, 1), dxfattribs={"layer": "0"})

    stream = io.StringIO()
    doc.write(stream)
    return stream.getvalue()


@pytest.fixture(scope="session")
def dxf_text():
    return build_dxf_text()


@pytest.fixture
def dxf_bytes(dxf_text):
    return dxf_text.encode("utf-8")


@pytest.fixture
def cp1252_dxf_bytes(tmp_path):
    """R2000 drawing saved with its ANSI_1252 code page."""
    doc = ezdxf.new("R2000")
    doc.layers.add("GEB-SAN")
    doc.modelspace().add_text("GEB Spülkasten", dxfattribs={"layer": "GEB-SAN"})

    path = tmp_path / "legacy.dxf"
    doc.saveas(path)
    return path.read_bytes()
