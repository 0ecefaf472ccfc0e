"""Tests for GeoJSON and KML exporters of the rendered tree."""

import xml.etree.ElementTree as ET

import pytest

from topmarks.layers import Folder, GeoPoint, Layer
from topmarks.layers.exporters.geojson import export_geojson
from topmarks.layers.exporters.kml import KML_NS, export_kml, to_kml_color

pytestmark = pytest.mark.unit

NS = {"k": KML_NS}


@pytest.fixture
def visible():
    reefs = Layer("l1", "Reefs", (GeoPoint("A", -38.1, 144.8), GeoPoint("B", -38.2, 144.9)))
    wrecks = Layer("l2", "Wrecks", (GeoPoint("C", -38.3, 144.7),))
    folder = Folder("f1", "Dives", (reefs, wrecks))
    return [(folder, [reefs, wrecks])]


class TestGeoJSONExporter:
    def test_feature_collection(self, visible):
        result = export_geojson(visible)
        assert result["type"] == "FeatureCollection"
        assert len(result["features"]) == 3

    def test_coordinates_lng_first(self, visible):
        feature = export_geojson(visible)["features"][0]
        assert feature["geometry"] == {"type": "Point", "coordinates": [144.8, -38.1]}

    def test_properties(self, visible):
        feature = export_geojson(visible)["features"][2]
        assert feature["id"] == "l2-0"
        assert feature["properties"]["name"] == "C"
        assert feature["properties"]["layer_name"] == "Wrecks"
        assert feature["properties"]["folder_id"] == "f1"
        assert "style" not in feature["properties"]

    def test_style_copied(self, visible):
        style = {"color": "#1976d2", "radius": 120}
        feature = export_geojson(visible, style=style)["features"][0]
        assert feature["properties"]["style"] == style

    def test_only_given_layers_exported(self, visible):
        folder, layers = visible[0]
        result = export_geojson([(folder, layers[:1])])
        assert [f["properties"]["name"] for f in result["features"]] == ["A", "B"]

    def test_empty(self):
        assert export_geojson([]) == {"type": "FeatureCollection", "features": []}


class TestKMLExporter:
    def test_valid_xml(self, visible):
        root = ET.fromstring(export_kml(visible))
        assert root.tag == f"{{{KML_NS}}}kml"

    def test_nested_folders(self, visible):
        root = ET.fromstring(export_kml(visible, name="Trip"))
        doc = root.find("k:Document", NS)
        assert doc.find("k:name", NS).text == "Trip"
        folder = doc.find("k:Folder", NS)
        assert folder.find("k:name", NS).text == "Dives"
        layers = folder.findall("k:Folder", NS)
        assert [l.find("k:name", NS).text for l in layers] == ["Reefs", "Wrecks"]
        assert len(layers[0].findall("k:Placemark", NS)) == 2

    def test_placemark_coordinates(self, visible):
        root = ET.fromstring(export_kml(visible))
        pm = root.find(".//k:Placemark", NS)
        assert pm.find("k:name", NS).text == "A"
        assert pm.find("k:Point/k:coordinates", NS).text == "144.8,-38.1,0"

    def test_color_style(self, visible):
        root = ET.fromstring(export_kml(visible, color="#1976d2"))
        assert root.find(".//k:Style/k:IconStyle/k:color", NS).text == "ffd27619"
        assert root.find(".//k:Placemark/k:styleUrl", NS).text == "#mark"

    def test_to_kml_color_rejects_bad_input(self):
        with pytest.raises(ValueError):
            to_kml_color("blue")
