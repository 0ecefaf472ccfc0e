"""FolderStore: owner of the folder tree, its persistence and visibility.

The store is created with ``FolderStore.open(storage)`` and handed to
whatever needs it; ``close()`` flushes the last snapshot. Every mutation
saves the full tree and then reconciles visibility.
"""

from __future__ import annotations

from loguru import logger

from topmarks.layers import folders as tree_ops
from topmarks.layers.folders import Tree
from topmarks.layers.layer import Folder, Layer
from topmarks.layers.parsers.gps_text import parse_batch
from topmarks.layers.persistence import STORAGE_KEY, KeyValueStorage, TreePersistence
from topmarks.layers.visibility import VisibilityState


class StoreClosedError(RuntimeError):
    """Raised when a closed FolderStore is used."""


class FolderStore:
    """Explicit store for the folder/layer tree."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = STORAGE_KEY,
        strict_range: bool = False,
    ) -> None:
        self._persistence = TreePersistence(storage, key)
        self._visibility = VisibilityState()
        self._folders: Tree = ()
        self._closed = True
        self.strict_range = strict_range
        self.was_corrupted = False

    @classmethod
    def open(
        cls,
        storage: KeyValueStorage,
        key: str = STORAGE_KEY,
        strict_range: bool = False,
    ) -> FolderStore:
        """Create a store and load the persisted tree into it."""
        store = cls(storage, key=key, strict_range=strict_range)
        store.load()
        return store

    def load(self) -> None:
        folders, corrupted = self._persistence.load()
        if corrupted:
            logger.warning(
                f"Stored folders under {self._persistence.key!r} were unreadable; "
                f"starting from the default folder"
            )
        self.was_corrupted = corrupted
        self._folders = folders
        self._closed = False
        self._visibility.reconcile(self._folders)
        layer_count = sum(len(f.layers) for f in folders)
        logger.info(f"Loaded {len(folders)} folders, {layer_count} layers")

    def close(self) -> None:
        """Flush the current tree and refuse further use."""
        if self._closed:
            return
        self._save()
        self._closed = True
        logger.info("Folder store closed")

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> FolderStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosedError("FolderStore is closed")

    def _save(self) -> None:
        try:
            self._persistence.save(self._folders)
        except OSError as e:
            logger.error(f"Failed to save folders under {self._persistence.key!r}: {e}")

    def _commit(self, folders: Tree) -> None:
        self._folders = folders
        self._visibility.reconcile(folders)
        self._save()

    # ==================
    # Reads
    # ==================

    @property
    def folders(self) -> Tree:
        return self._folders

    @property
    def visibility(self) -> VisibilityState:
        return self._visibility

    def get_folder(self, folder_id: str) -> Folder | None:
        return tree_ops.find_folder(self._folders, folder_id)

    def snapshot(self) -> dict:
        """Read-only view for the rendering consumer."""
        return {
            "folders": self._folders,
            "layer_visible": dict(self._visibility.layer_visible),
            "folder_visible": dict(self._visibility.folder_visible),
        }

    def render(self) -> list[tuple[Folder, list[Layer]]]:
        """Visible folders, each with its visible layers."""
        return self._visibility.visible_tree(self._folders)

    # ==================
    # Mutations
    # ==================

    def add_folder(self, folder: Folder) -> Folder:
        self._check_open()
        self._commit(tree_ops.add_folder(self._folders, folder))
        logger.info(f"Created folder '{folder.name}' ({folder.id})")
        return folder

    def create_folder(self, name: str) -> Folder:
        """Add a new folder with a freshly minted id."""
        return self.add_folder(tree_ops.new_folder(name))

    def remove_folder(self, folder_id: str) -> None:
        self._check_open()
        self._commit(tree_ops.remove_folder(self._folders, folder_id))
        logger.info(f"Removed folder {folder_id}")

    def update_folder_name(self, folder_id: str, name: str) -> None:
        self._check_open()
        self._commit(tree_ops.update_folder_name(self._folders, folder_id, name))
        logger.info(f"Renamed folder {folder_id} to '{name}'")

    def add_layer(self, folder_id: str, layer: Layer) -> None:
        self._check_open()
        self._commit(tree_ops.add_layer(self._folders, folder_id, layer))
        logger.info(f"Added layer '{layer.name}' ({len(layer.marks)} marks) to {folder_id}")

    def remove_layer(self, folder_id: str, layer_id: str) -> None:
        self._check_open()
        self._commit(tree_ops.remove_layer(self._folders, folder_id, layer_id))
        logger.info(f"Removed layer {layer_id} from {folder_id}")

    def commit_paste(self, folder_id: str, name: str, text: str) -> Layer | None:
        """Parse pasted text and add it to a folder as a new layer.

        Returns:
            The new Layer, or None when the folder does not exist or no
            line could be parsed.
        """
        self._check_open()
        if self.get_folder(folder_id) is None:
            return None
        marks = parse_batch(text, strict=self.strict_range)
        if not marks:
            return None
        layer = tree_ops.new_layer(name, marks)
        self.add_layer(folder_id, layer)
        return layer

    def toggle_folder(self, folder_id: str) -> None:
        self._check_open()
        self._visibility.toggle_folder(folder_id)

    def toggle_layer(self, layer_id: str) -> None:
        self._check_open()
        self._visibility.toggle_layer(layer_id)
