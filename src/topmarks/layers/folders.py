"""Pure transitions over the folder tree.

Every function takes the current tree (a tuple of Folders) and returns a new
one. Unknown ids are a no-op and the order of untouched siblings is kept.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from topmarks.layers.layer import Folder, GeoPoint, Layer, new_id

DEFAULT_FOLDER_ID = "default"
DEFAULT_FOLDER_NAME = "Default Folder"

Tree = tuple[Folder, ...]


def default_tree() -> Tree:
    """The tree used when nothing (or nothing usable) is stored."""
    return (Folder(id=DEFAULT_FOLDER_ID, name=DEFAULT_FOLDER_NAME, layers=()),)


def new_folder(name: str) -> Folder:
    return Folder(id=new_id(), name=name, layers=())


def new_layer(name: str, marks: Iterable[GeoPoint]) -> Layer:
    return Layer(id=new_id(), name=name, marks=tuple(marks))


def find_folder(folders: Tree, folder_id: str) -> Folder | None:
    for folder in folders:
        if folder.id == folder_id:
            return folder
    return None


def find_layer(folders: Tree, layer_id: str) -> tuple[Folder, Layer] | None:
    """Locate a layer anywhere in the tree, with the folder that owns it."""
    for folder in folders:
        for layer in folder.layers:
            if layer.id == layer_id:
                return folder, layer
    return None


def add_folder(folders: Tree, folder: Folder) -> Tree:
    """Append a folder. Ids are not de-duplicated here."""
    return (*folders, folder)


def remove_folder(folders: Tree, folder_id: str) -> Tree:
    return tuple(f for f in folders if f.id != folder_id)


def update_folder_name(folders: Tree, folder_id: str, name: str) -> Tree:
    return tuple(replace(f, name=name) if f.id == folder_id else f for f in folders)


def add_layer(folders: Tree, folder_id: str, layer: Layer) -> Tree:
    return tuple(
        replace(f, layers=(*f.layers, layer)) if f.id == folder_id else f
        for f in folders
    )


def remove_layer(folders: Tree, folder_id: str, layer_id: str) -> Tree:
    return tuple(
        replace(f, layers=tuple(l for l in f.layers if l.id != layer_id))
        if f.id == folder_id
        else f
        for f in folders
    )
