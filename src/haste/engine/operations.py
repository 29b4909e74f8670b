"""One network operation per object key."""

from __future__ import annotations

from pathlib import Path

from haste.errors import TransferError
from haste.storage.object_store import ObjectStore

UPLOAD = "upload"
DOWNLOAD = "download"
DELETE = "delete"

OPERATIONS = (UPLOAD, DOWNLOAD, DELETE)


class UploadOperation:
    name = UPLOAD

    def __init__(self, store: ObjectStore, base_path: str | Path):
        self.store = store
        self.base_path = Path(base_path)

    def __call__(self, key: str) -> None:
        self.store.put_object(key, self.base_path.joinpath(*key.split("/")))


class DownloadOperation:
    name = DOWNLOAD

    def __init__(self, store: ObjectStore, base_path: str | Path):
        self.store = store
        self.base_path = Path(base_path).resolve()

    def local_path(self, key: str) -> Path:
        target = self.base_path.joinpath(*key.split("/")).resolve()
        if target == self.base_path or self.base_path not in target.parents:
            raise TransferError(f"Refusing to write '{key}' outside '{self.base_path}'")
        return target

    def __call__(self, key: str) -> None:
        self.store.download_object(key, self.local_path(key))


class DeleteOperation:
    name = DELETE

    def __init__(self, store: ObjectStore):
        self.store = store

    def __call__(self, key: str) -> None:
        self.store.delete_object(key)


def build_operation(mode: str, store: ObjectStore, base_path: str | Path | None = None):
    if mode in (UPLOAD, DOWNLOAD) and base_path is None:
        raise ValueError(f"{mode} requires a local base path")
    if mode == UPLOAD:
        return UploadOperation(store, base_path)
    if mode == DOWNLOAD:
        return DownloadOperation(store, base_path)
    if mode == DELETE:
        return DeleteOperation(store)
    raise ValueError(f"{mode} not a supported operation")
