"""
DXF Document Data Models

Dataclasses for the parsed drawing and the results derived from it.
Records stay open mappings: known fields are named per variant, every
other key is carried along untouched.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional


def _as_dict(value) -> dict:
    return dict(value) if isinstance(value, Mapping) else {}


def _as_list(value) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


@dataclass(frozen=True)
class DXFRecord:
    """Open mapping of DXF fields."""

    kind: ClassVar[str] = "record"
    known_fields: ClassVar[tuple[str, ...]] = ()

    fields: Mapping

    @classmethod
    def wrap(cls, data) -> "DXFRecord":
        return cls(_as_dict(data))

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    @property
    def other_fields(self) -> dict:
        return {k: v for k, v in self.fields.items() if k not in self.known_fields}

    def point(self, key: str) -> dict:
        """Point record ``{x, y, z}`` stored under ``key`` or an empty dict."""
        return _as_dict(self.fields.get(key))


@dataclass(frozen=True)
class Entity(DXFRecord):
    """Single drawing entity (LINE, TEXT, INSERT, ...)."""

    kind: ClassVar[str] = "entity"
    known_fields: ClassVar[tuple[str, ...]] = (
        "type", "handle", "ownerHandle", "layer", "name", "lineType",
        "lineweight", "colorIndex", "color", "position", "rotation",
        "xScale", "vertices", "center", "radius", "text", "textHeight",
        "startPoint", "endPoint", "lineTypeScale", "shape",
        "hasContinuousLinetypePattern", "width",
    )

    @property
    def type(self) -> str:
        return self.fields.get("type") or ""

    @property
    def layer(self) -> Optional[str]:
        return self.fields.get("layer")

    @property
    def text(self) -> Optional[str]:
        return self.fields.get("text")


@dataclass(frozen=True)
class Block(DXFRecord):
    """Block definition with its own entity list."""

    kind: ClassVar[str] = "block"
    known_fields: ClassVar[tuple[str, ...]] = (
        "handle", "ownerHandle", "layer", "name2", "xrefPath",
        "position", "entities",
    )

    @property
    def layer(self) -> Optional[str]:
        return self.fields.get("layer")

    @property
    def text(self) -> Optional[str]:
        return self.fields.get("text")

    @property
    def children(self) -> list[Entity]:
        return [Entity.wrap(e) for e in _as_list(self.fields.get("entities"))]


@dataclass(frozen=True)
class Layer(DXFRecord):
    """Layer table entry."""

    kind: ClassVar[str] = "layer"
    known_fields: ClassVar[tuple[str, ...]] = (
        "name", "frozen", "visible", "colorIndex", "color",
    )


@dataclass(frozen=True)
class ParsedDocument:
    """
    Parsed drawing as produced by the parser collaborator.

    Mirrors the dxf-parser layout: ``header``, ``entities``, ``blocks``
    and ``tables.layer.layers``. Missing or ill-typed collections load as
    empty ones.
    """

    header: dict = field(default_factory=dict)
    entities: list = field(default_factory=list)
    blocks: dict = field(default_factory=dict)
    layers: dict = field(default_factory=dict)
    tables: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw) -> "ParsedDocument":
        raw = _as_dict(raw)
        tables = _as_dict(raw.get("tables"))
        layer_table = _as_dict(tables.get("layer"))
        return cls(
            header=_as_dict(raw.get("header")),
            entities=[e for e in _as_list(raw.get("entities")) if isinstance(e, Mapping)],
            blocks=_as_dict(raw.get("blocks")),
            layers=_as_dict(layer_table.get("layers")),
            tables=tables,
        )

    def entity_records(self) -> list[Entity]:
        return [Entity.wrap(e) for e in self.entities]

    def block_records(self) -> list[tuple[str, Block]]:
        return [(name, Block.wrap(b)) for name, b in self.blocks.items()]

    def layer_records(self) -> list[tuple[str, Layer]]:
        return [(name, Layer.wrap(l)) for name, l in self.layers.items()]

    def to_dict(self) -> dict:
        tables = dict(self.tables)
        layer_table = _as_dict(tables.get("layer"))
        layer_table["layers"] = self.layers
        tables["layer"] = layer_table
        return {
            "header": self.header,
            "entities": self.entities,
            "blocks": self.blocks,
            "tables": tables,
        }


@dataclass
class ClassifiedSubset:
    """Elements of one document that matched the classifier."""

    entities: list = field(default_factory=list)
    blocks: list = field(default_factory=list)   # [(name, block), ...]
    layers: list = field(default_factory=list)   # [(name, layer), ...]
    article_codes: list = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.entities or self.blocks or self.layers)

    @property
    def element_count(self) -> int:
        return len(self.entities) + len(self.blocks) + len(self.layers)

    def layers_dict(self) -> dict:
        return dict(self.layers)

    def to_dict(self) -> dict:
        return {
            "entities": self.entities,
            "blocks": dict(self.blocks),
            "layers": self.layers_dict(),
        }


@dataclass(frozen=True)
class StatRow:
    """Entity count per type."""

    type: str
    count: int
    percentage: str

    def to_dict(self) -> dict:
        return {"type": self.type, "count": self.count, "percentage": self.percentage}
