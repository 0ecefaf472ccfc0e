"""Export visible folders/layers to a GeoJSON dict (RFC 7946 compliant).

GeoJSON coordinates are [lng, lat]; GeoPoints store lat first, so the order
is swapped here.
"""

from __future__ import annotations

from topmarks.layers.layer import Folder, GeoPoint, Layer


def export_geojson(
    visible: list[tuple[Folder, list[Layer]]], style: dict | None = None
) -> dict:
    """Export the rendering filter output as a GeoJSON FeatureCollection.

    Args:
        visible: (Folder, layers) pairs as returned by FolderStore.render().
        style: Optional rendering hints copied onto every feature
            (e.g. {"color": "#1976d2", "radius": 120}).

    Returns:
        Dict representing a valid GeoJSON FeatureCollection.
    """
    features = []
    for folder, layers in visible:
        for layer in layers:
            for idx, mark in enumerate(layer.marks):
                features.append(_mark_to_geojson(folder, layer, idx, mark, style))

    return {
        "type": "FeatureCollection",
        "features": features,
    }


def _mark_to_geojson(
    folder: Folder, layer: Layer, idx: int, mark: GeoPoint, style: dict | None
) -> dict:
    properties = {
        "name": mark.name,
        "layer_id": layer.id,
        "layer_name": layer.name,
        "folder_id": folder.id,
        "folder_name": folder.name,
    }
    if style:
        properties["style"] = dict(style)
    return {
        "type": "Feature",
        "id": f"{layer.id}-{idx}",
        "geometry": {
            "type": "Point",
            "coordinates": [mark.lng, mark.lat],
        },
        "properties": properties,
    }
