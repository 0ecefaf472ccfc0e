"""Folder and layer API endpoints.

The FolderStore is created by the application lifespan and reached through
``get_store``; handlers never build their own.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from app.config import settings
from topmarks.layers import Folder, FolderStore, GeoPoint, Layer
from topmarks.layers.exporters.geojson import export_geojson
from topmarks.layers.exporters.kml import export_kml
from topmarks.layers.parsers.gps_text import parse_report

router = APIRouter(prefix="/api", tags=["layers"])


def get_store(request: Request) -> FolderStore:
    """Dependency returning the application's FolderStore."""
    store: Optional[FolderStore] = getattr(request.app.state, "folder_store", None)
    if store is None or store.closed:
        raise HTTPException(status_code=503, detail="Folder store not available")
    return store


# ==================
# Request/Response Models
# ==================

class MarkModel(BaseModel):
    """A parsed GPS mark."""
    name: str
    lat: float
    lng: float


class LayerModel(BaseModel):
    """A layer and its marks."""
    id: str
    name: str
    marks: list[MarkModel]


class FolderModel(BaseModel):
    """A folder and its layers."""
    id: str
    name: str
    layers: list[LayerModel]


class SnapshotResponse(BaseModel):
    """Tree plus visibility flags."""
    folders: list[FolderModel]
    layer_visible: dict[str, bool]
    folder_visible: dict[str, bool]


class FolderNameRequest(BaseModel):
    """Create or rename a folder."""
    name: str = Field(min_length=1)


class ParseRequest(BaseModel):
    """Pasted text to preview."""
    text: str


class ParseResponse(BaseModel):
    """Preview of a paste."""
    marks: list[MarkModel]
    line_count: int
    parsed_count: int
    rejected: list[str]


class CreateLayerRequest(BaseModel):
    """Commit pasted text as a new layer."""
    name: str = Field(min_length=1)
    text: str


def _mark(point: GeoPoint) -> MarkModel:
    return MarkModel(name=point.name, lat=point.lat, lng=point.lng)


def _layer(layer: Layer) -> LayerModel:
    return LayerModel(id=layer.id, name=layer.name, marks=[_mark(m) for m in layer.marks])


def _folder(folder: Folder) -> FolderModel:
    return FolderModel(
        id=folder.id, name=folder.name, layers=[_layer(l) for l in folder.layers]
    )


def _snapshot(store: FolderStore) -> SnapshotResponse:
    snap = store.snapshot()
    return SnapshotResponse(
        folders=[_folder(f) for f in snap["folders"]],
        layer_visible=snap["layer_visible"],
        folder_visible=snap["folder_visible"],
    )


# ==================
# Folder Endpoints
# ==================

@router.get("/folders", response_model=SnapshotResponse)
def list_folders(store: FolderStore = Depends(get_store)):
    """Current tree and visibility flags."""
    return _snapshot(store)


@router.post("/folders", response_model=FolderModel)
def create_folder(request: FolderNameRequest, store: FolderStore = Depends(get_store)):
    """Create an empty folder."""
    name = request.name.strip()
    if not name:
        raise HTTPException(status_code=422, detail="Folder name must not be blank")
    return _folder(store.create_folder(name))


@router.patch("/folders/{folder_id}", response_model=FolderModel)
def rename_folder(
    folder_id: str, request: FolderNameRequest, store: FolderStore = Depends(get_store)
):
    """Rename a folder."""
    if store.get_folder(folder_id) is None:
        raise HTTPException(status_code=404, detail="Folder not found")
    name = request.name.strip()
    if not name:
        raise HTTPException(status_code=422, detail="Folder name must not be blank")
    store.update_folder_name(folder_id, name)
    return _folder(store.get_folder(folder_id))


@router.delete("/folders/{folder_id}", response_model=SnapshotResponse)
def delete_folder(folder_id: str, store: FolderStore = Depends(get_store)):
    """Remove a folder and every layer in it. Unknown ids are ignored."""
    store.remove_folder(folder_id)
    return _snapshot(store)


@router.post("/folders/{folder_id}/toggle", response_model=SnapshotResponse)
def toggle_folder(folder_id: str, store: FolderStore = Depends(get_store)):
    """Flip a folder's visibility."""
    store.toggle_folder(folder_id)
    return _snapshot(store)


# ==================
# Layer Endpoints
# ==================

@router.post("/parse", response_model=ParseResponse)
def preview_parse(request: ParseRequest):
    """Parse pasted text without storing anything."""
    report = parse_report(request.text, strict=settings.parser_strict_range)
    return ParseResponse(
        marks=[_mark(m) for m in report.marks],
        line_count=report.line_count,
        parsed_count=report.parsed_count,
        rejected=report.rejected,
    )


@router.post("/folders/{folder_id}/layers", response_model=LayerModel)
def create_layer(
    folder_id: str, request: CreateLayerRequest, store: FolderStore = Depends(get_store)
):
    """Parse pasted text and add it to a folder as a new layer."""
    if store.get_folder(folder_id) is None:
        raise HTTPException(status_code=404, detail="Folder not found")
    name = request.name.strip()
    if not name:
        raise HTTPException(status_code=422, detail="Layer name must not be blank")
    layer = store.commit_paste(folder_id, name, request.text)
    if layer is None:
        raise HTTPException(status_code=422, detail="No GPS marks could be parsed")
    return _layer(layer)


@router.delete("/folders/{folder_id}/layers/{layer_id}", response_model=SnapshotResponse)
def delete_layer(folder_id: str, layer_id: str, store: FolderStore = Depends(get_store)):
    """Remove a layer. Unknown ids are ignored."""
    store.remove_layer(folder_id, layer_id)
    return _snapshot(store)


@router.post("/layers/{layer_id}/toggle", response_model=SnapshotResponse)
def toggle_layer(layer_id: str, store: FolderStore = Depends(get_store)):
    """Flip a layer's visibility."""
    store.toggle_layer(layer_id)
    return _snapshot(store)


# ==================
# Map Endpoints
# ==================

def _style() -> dict:
    return {"color": settings.mark_color, "radius": settings.mark_radius_m}


@router.get("/map")
def map_payload(store: FolderStore = Depends(get_store)):
    """Everything the map needs: view defaults and the visible marks."""
    return {
        "center": {"lat": settings.map_center_lat, "lng": settings.map_center_lng},
        "zoom": settings.map_zoom,
        "style": _style(),
        "folders": [
            {
                "id": folder.id,
                "name": folder.name,
                "layers": [_layer(l).model_dump() for l in layers],
            }
            for folder, layers in store.render()
        ],
    }


@router.get("/map/geojson")
def map_geojson(store: FolderStore = Depends(get_store)):
    """Visible marks as a GeoJSON FeatureCollection."""
    return export_geojson(store.render(), style=_style())


@router.get("/map/kml")
def map_kml(store: FolderStore = Depends(get_store)):
    """Visible marks as a KML document."""
    body = export_kml(store.render(), name=settings.app_name, color=settings.mark_color)
    return Response(content=body, media_type="application/vnd.google-earth.kml+xml")
