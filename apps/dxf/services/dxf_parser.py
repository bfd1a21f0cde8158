"""
DXF Parser Service

Reads DXF text or raw file bytes with ezdxf and converts the drawing into the plain
mapping layout consumed by the extractor: header variables, modelspace
entities, block definitions and the layer table. Field names follow the
dxf-parser conventions (camelCase, points as ``{x, y, z}``).
"""
import io
import logging
import re
from pathlib import Path
from typing import Optional, Union

import ezdxf
from ezdxf import recover
from ezdxf.colors import aci2rgb, rgb2int
from ezdxf.document import Drawing
from ezdxf.entities import DXFEntity
from ezdxf.lldxf.const import DXFStructureError
from ezdxf.math import Vec2, Vec3

from .errors import DXFParseError
from .models import ParsedDocument

logger = logging.getLogger(__name__)

VERSION_CODE_RE = re.compile(r"^AC\d{4}")
VERSION_SCAN_LINES = 40
LAYOUT_BLOCK_PREFIXES = ("*MODEL_SPACE", "*PAPER_SPACE")

# ezdxf attribute name -> dxf-parser field name
FIELD_NAMES = {
    "insert": "position",
    "start": "startPoint",
    "end": "endPoint",
    "color": "colorIndex",
    "true_color": "color",
    "linetype": "lineType",
    "owner": "ownerHandle",
    "ltscale": "lineTypeScale",
    "xscale": "xScale",
    "yscale": "yScale",
    "zscale": "zScale",
    "height": "textHeight",
    "char_height": "height",
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _point(value) -> dict:
    return {"x": value.x, "y": value.y, "z": getattr(value, "z", 0.0)}


def to_plain(value):
    """Convert ezdxf values into JSON-compatible Python values."""
    if isinstance(value, (Vec3, Vec2)):
        return _point(value)
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def read_dxf_version(source: Union[str, Path, io.TextIOBase]) -> Optional[str]:
    """
    Return the ``$ACADVER`` code (e.g. ``AC1032``) from the first lines.

    ``source`` is DXF text, a path or an open text stream. Only the first
    40 lines are inspected.
    """
    if isinstance(source, Path):
        with source.open("r", encoding="utf-8", errors="ignore") as f:
            lines = [f.readline() for _ in range(VERSION_SCAN_LINES)]
    elif isinstance(source, str):
        lines = source.splitlines()[:VERSION_SCAN_LINES]
    else:
        lines = [source.readline() for _ in range(VERSION_SCAN_LINES)]

    for line in lines:
        match = VERSION_CODE_RE.match(line.strip())
        if match:
            return line.strip()
    return None


class DXFParserService:
    """
    Service for converting DXF content into a ParsedDocument.

    Usage:
        parser = DXFParserService()
        document = parser.parse_bytes(content)

        for entity in document.entities:
            print(entity["type"], entity.get("layer"))
    """

    def __init__(self):
        self.doc: Optional[Drawing] = None

    def parse_file(self, filepath: Union[str, Path]) -> ParsedDocument:
        """Parse a DXF file from disk."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"DXF file not found: {filepath}")

        logger.info(f"Parsing DXF file: {filepath}")
        return self.parse_bytes(filepath.read_bytes())

    def parse_bytes(self, content: bytes) -> ParsedDocument:
        """
        Parse raw DXF file content.

        ezdxf recover mode reads the bytes, so the text encoding follows
        ``$DWGCODEPAGE`` (cp1252 and friends for pre-R2007 drawings).
        """
        if not content or not content.strip():
            raise DXFParseError("Parsing failed: file is empty")
        return self._parse(lambda: self._recover(io.BytesIO(content)))

    def parse_text(self, text: str) -> ParsedDocument:
        """Parse DXF text, falling back to ezdxf recover mode on structure errors."""
        if not text or not text.strip():
            raise DXFParseError("Parsing failed: file is empty")
        return self._parse(lambda: self._read_text(text))

    def _read_text(self, text: str) -> Drawing:
        try:
            return ezdxf.read(io.StringIO(text))
        except DXFStructureError as e:
            logger.warning(f"DXF structure error, trying recovery mode: {e}")
            return self._recover(io.BytesIO(text.encode("utf-8")))

    def _recover(self, stream: io.BytesIO) -> Drawing:
        doc, auditor = recover.read(stream)
        if auditor.has_errors:
            logger.warning(f"Recovered DXF with {len(auditor.errors)} errors")
        return doc

    def _parse(self, read) -> ParsedDocument:
        try:
            self.doc = read()
        except Exception as e:
            raise self._failure(e) from e

        if self.doc is None:
            raise DXFParseError(
                "Failed to parse DXF file - invalid format or corrupted file"
            )

        try:
            return ParsedDocument.from_dict(self.to_dict())
        except Exception as e:
            raise self._failure(e) from e

    @staticmethod
    def _failure(error: Exception) -> DXFParseError:
        logger.error(f"DXF parsing failed: {error}")
        return DXFParseError(f"Parsing failed: {str(error) or 'Unknown error occurred'}")

    def to_dict(self) -> dict:
        """Convert the loaded drawing into the dxf-parser mapping layout."""
        if not self.doc:
            raise ValueError("No document loaded")

        entities = [self._convert_entity(e) for e in self.doc.modelspace()]
        result = {
            "header": self._convert_header(),
            "entities": entities,
            "blocks": self._convert_blocks(),
            "tables": {"layer": {"layers": self._convert_layers()}},
        }
        logger.info(
            f"Converted {len(entities)} entities, {len(result['blocks'])} blocks"
        )
        return result

    def _convert_header(self) -> dict:
        header = {}
        for name in self.doc.header.varnames():
            try:
                header[name] = to_plain(self.doc.header[name])
            except Exception as e:
                logger.debug(f"Skipping header variable {name}: {e}")
        return header

    def _convert_entity(self, entity: DXFEntity) -> dict:
        entity_type = entity.dxftype()
        data = {"type": entity_type}

        for key, value in entity.dxfattribs().items():
            data[FIELD_NAMES.get(key) or _camel(key)] = to_plain(value)

        try:
            if entity_type == "MTEXT":
                data["text"] = entity.text
            elif entity_type == "LWPOLYLINE":
                data["vertices"] = [
                    {"x": x, "y": y} for x, y in entity.get_points("xy")
                ]
                data["shape"] = entity.closed
            elif entity_type == "POLYLINE":
                data["vertices"] = [
                    _point(v.dxf.location) for v in entity.vertices
                ]
                data["shape"] = entity.is_closed
            elif entity_type == "INSERT":
                data["attributes"] = [
                    {"tag": a.dxf.tag, "text": a.dxf.text} for a in entity.attribs
                ]
        except Exception as e:
            logger.debug(f"Could not convert {entity_type} details: {e}")

        return data

    def _convert_blocks(self) -> dict:
        blocks = {}
        for block in self.doc.blocks:
            header = block.block
            # Layout blocks would repeat the modelspace/paperspace entities.
            is_layout = block.name.upper().startswith(LAYOUT_BLOCK_PREFIXES)
            data = {
                "handle": header.dxf.handle,
                "ownerHandle": header.dxf.get("owner"),
                "name": block.name,
                "layer": header.dxf.get("layer", "0"),
                "position": to_plain(header.dxf.get("base_point", Vec3())),
                "entities": [] if is_layout else [self._convert_entity(e) for e in block],
            }
            xref_path = header.dxf.get("xref_path")
            if xref_path:
                data["xrefPath"] = xref_path
            blocks[block.name] = data
        return blocks

    def _convert_layers(self) -> dict:
        layers = {}
        for layer in self.doc.layers:
            name = layer.dxf.name
            aci = abs(layer.dxf.get("color", 7))
            if layer.rgb is not None:
                color = rgb2int(layer.rgb)
            elif 0 < aci < 256:
                color = rgb2int(aci2rgb(aci))
            else:
                color = None
            layers[name] = {
                "name": name,
                "frozen": layer.is_frozen(),
                "visible": layer.is_on(),
                "colorIndex": aci,
                "color": color,
            }
        return layers


def parse_dxf(filepath: Union[str, Path]) -> ParsedDocument:
    """Quick parse function."""
    parser = DXFParserService()
    return parser.parse_file(filepath)
