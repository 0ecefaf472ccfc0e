"""Per-folder and per-layer visibility flags.

Flags are not persisted. ``reconcile`` is run after every tree change so new
ids start out visible and ids that left the tree are forgotten.
"""

from __future__ import annotations

from topmarks.layers.layer import Folder, Layer


def _sync(flags: dict[str, bool], ids: list[str]) -> None:
    present = set(ids)
    for item_id in ids:
        if item_id not in flags:
            flags[item_id] = True
    for stale in [k for k in flags if k not in present]:
        del flags[stale]


class VisibilityState:
    """Two independent boolean maps keyed by folder id and layer id."""

    def __init__(self) -> None:
        self.folder_visible: dict[str, bool] = {}
        self.layer_visible: dict[str, bool] = {}

    def reconcile(self, folders: tuple[Folder, ...]) -> None:
        """Add missing ids as visible and prune ids no longer in the tree."""
        _sync(self.folder_visible, [f.id for f in folders])
        _sync(self.layer_visible, [l.id for f in folders for l in f.layers])

    def toggle_folder(self, folder_id: str) -> None:
        if folder_id in self.folder_visible:
            self.folder_visible[folder_id] = not self.folder_visible[folder_id]

    def toggle_layer(self, layer_id: str) -> None:
        if layer_id in self.layer_visible:
            self.layer_visible[layer_id] = not self.layer_visible[layer_id]

    def visible_tree(
        self, folders: tuple[Folder, ...]
    ) -> list[tuple[Folder, list[Layer]]]:
        """Folders that are shown, each with the layers shown inside it.

        Hiding a folder leaves its layers' own flags untouched.
        """
        result: list[tuple[Folder, list[Layer]]] = []
        for folder in folders:
            if not self.folder_visible.get(folder.id, False):
                continue
            layers = [l for l in folder.layers if self.layer_visible.get(l.id, False)]
            result.append((folder, layers))
        return result
