"""GeoPoint, Layer and Folder dataclasses for the folder/layer tree.

Values are frozen and hold tuples, so a tree can only change by building a
new one (see ``topmarks.layers.folders``). Coordinates are decimal degrees.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field


def new_id() -> str:
    """Return a fresh random id for a Folder or Layer."""
    return uuid.uuid4().hex


def _require(data, key: str, kind: type):
    if not isinstance(data, dict):
        raise ValueError(f"Expected an object, got {type(data).__name__}")
    if key not in data:
        raise ValueError(f"Missing field: {key}")
    value = data[key]
    # bool is an int subclass; never accept it as a number
    if kind is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Field {key} must be a number")
        return float(value)
    if not isinstance(value, kind):
        raise ValueError(f"Field {key} must be {kind.__name__}")
    return value


@dataclass(frozen=True)
class GeoPoint:
    """A named geographic point.

    Attributes:
        name: Label shown next to the mark.
        lat: Latitude in decimal degrees (south is negative).
        lng: Longitude in decimal degrees (west is negative).
    """

    name: str
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"name": self.name, "lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: dict) -> GeoPoint:
        return cls(
            name=_require(data, "name", str),
            lat=_require(data, "lat", float),
            lng=_require(data, "lng", float),
        )


@dataclass(frozen=True)
class Layer:
    """A named, ordered set of points from one paste or import.

    Attributes:
        id: Unique identifier, minted when the layer is committed.
        name: Human-readable display name.
        marks: Points in the order they were parsed.
    """

    id: str
    name: str
    marks: tuple[GeoPoint, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "marks": [m.to_dict() for m in self.marks],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Layer:
        marks = _require(data, "marks", list)
        return cls(
            id=_require(data, "id", str),
            name=_require(data, "name", str),
            marks=tuple(GeoPoint.from_dict(m) for m in marks),
        )


@dataclass(frozen=True)
class Folder:
    """A named container of Layers; the persisted unit of the tree.

    Attributes:
        id: Unique identifier.
        name: Human-readable display name.
        layers: Owned layers, in insertion order.
    """

    id: str
    name: str
    layers: tuple[Layer, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "layers": [layer.to_dict() for layer in self.layers],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Folder:
        layers = _require(data, "layers", list)
        return cls(
            id=_require(data, "id", str),
            name=_require(data, "name", str),
            layers=tuple(Layer.from_dict(layer) for layer in layers),
        )
