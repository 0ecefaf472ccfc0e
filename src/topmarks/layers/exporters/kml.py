"""Export visible folders/layers to a KML 2.2 XML string.

Uses only xml.etree.ElementTree (stdlib). Folders and layers become nested
KML <Folder> elements. KML coordinates are "lng,lat,alt" (longitude first).
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from topmarks.layers.layer import Folder, GeoPoint, Layer

KML_NS = "http://www.opengis.net/kml/2.2"


def export_kml(
    visible: list[tuple[Folder, list[Layer]]],
    name: str = "TopMarks",
    color: str | None = None,
) -> str:
    """Export the rendering filter output to a KML XML string.

    Args:
        visible: (Folder, layers) pairs as returned by FolderStore.render().
        name: Document name.
        color: Optional "#rrggbb" mark color.

    Returns:
        KML XML string.
    """
    kml = ET.Element("kml")
    kml.set("xmlns", KML_NS)

    doc = ET.SubElement(kml, "Document")
    ET.SubElement(doc, "name").text = name

    style_url = None
    if color:
        style_url = "#mark"
        _write_style(doc, "mark", color)

    for folder, layers in visible:
        folder_elem = ET.SubElement(doc, "Folder")
        ET.SubElement(folder_elem, "name").text = folder.name or folder.id
        for layer in layers:
            layer_elem = ET.SubElement(folder_elem, "Folder")
            ET.SubElement(layer_elem, "name").text = layer.name or layer.id
            for mark in layer.marks:
                _write_placemark(layer_elem, mark, style_url)

    return ET.tostring(kml, encoding="unicode", xml_declaration=True)


def to_kml_color(color: str) -> str:
    """Convert "#rrggbb" to KML's "aabbggrr" (fully opaque)."""
    hex_rgb = color.lstrip("#")
    if len(hex_rgb) != 6:
        raise ValueError(f"Expected #rrggbb, got {color!r}")
    rr, gg, bb = hex_rgb[0:2], hex_rgb[2:4], hex_rgb[4:6]
    return f"ff{bb}{gg}{rr}".lower()


def _write_style(doc: ET.Element, style_id: str, color: str) -> None:
    style_elem = ET.SubElement(doc, "Style")
    style_elem.set("id", style_id)
    icon_style = ET.SubElement(style_elem, "IconStyle")
    ET.SubElement(icon_style, "color").text = to_kml_color(color)


def _write_placemark(parent: ET.Element, mark: GeoPoint, style_url: str | None) -> None:
    pm = ET.SubElement(parent, "Placemark")
    ET.SubElement(pm, "name").text = mark.name
    if style_url:
        ET.SubElement(pm, "styleUrl").text = style_url
    point = ET.SubElement(pm, "Point")
    ET.SubElement(point, "coordinates").text = f"{mark.lng},{mark.lat},0"
