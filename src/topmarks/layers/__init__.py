"""Folder/layer tree for pasted GPS marks.

Parses free-text mark listings, groups the results into Folders of Layers,
persists the tree as a JSON snapshot and tracks what is visible.
"""

from topmarks.layers.layer import Folder, GeoPoint, Layer
from topmarks.layers.store import FolderStore, StoreClosedError

__all__ = ["Folder", "FolderStore", "GeoPoint", "Layer", "StoreClosedError"]
