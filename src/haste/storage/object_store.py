from __future__ import annotations

from pathlib import Path

import requests

from haste.errors import HasteError, TransferError
from haste.logging_config import get_logger
from haste.storage.session import Session

logger = get_logger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


def _parse_listing(body: str) -> list[str]:
    return [line.rstrip() for line in body.strip().split("\n") if line.strip()]


def _ensure_success(response: requests.Response, action: str, target: str) -> None:
    if not 200 <= response.status_code < 300:
        raise TransferError(
            f"Error {action} '{target}': status={response.status_code}",
            status=response.status_code,
        )


class ObjectStore:
    """Object operations against one container.

    Every call builds its own request from the read-only session, so a single
    instance is safe to share between worker threads.
    """

    def __init__(self, session: Session, http: requests.Session):
        self.session = session
        self.http = http

    @property
    def container(self) -> str:
        return self.session.container

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = self.session.auth_headers()
        headers.update(extra)
        return headers

    def create_container(self) -> int:
        try:
            response = self.http.put(self.session.container_url, data=b"", headers=self._headers())
        except requests.exceptions.RequestException as exc:
            raise HasteError(f"Unable to create container '{self.container}': {exc}") from exc
        response.close()
        logger.info("Create container: container=%s status=%s", self.container, response.status_code)
        return response.status_code

    def _list_page(self, url: str, marker: str | None) -> list[str]:
        params = {"marker": marker} if marker else None
        try:
            response = self.http.get(url, params=params, headers=self._headers(Accept="text/plain"))
        except requests.exceptions.RequestException as exc:
            raise TransferError(f"Error listing '{url}' marker={marker!r}: {exc}") from exc
        with response:
            _ensure_success(response, "listing", url)
            if response.status_code == 204:
                return []
            return _parse_listing(response.text)

    def list_objects_page(self, marker: str | None = None) -> list[str]:
        return self._list_page(self.session.container_url, marker)

    def list_containers_page(self, marker: str | None = None) -> list[str]:
        return self._list_page(self.session.account_url, marker)

    def put_object(self, key: str, source: str | Path) -> None:
        with open(source, "rb") as body:
            try:
                response = self.http.put(self.session.object_url(key), data=body, headers=self._headers())
            except requests.exceptions.RequestException as exc:
                raise TransferError(f"Error uploading file '{source}' to '{key}': {exc}") from exc
        with response:
            _ensure_success(response, "uploading", key)

    def download_object(self, key: str, destination: str | Path) -> int:
        """Stream ``key`` into ``destination``; returns the number of bytes written."""
        destination = Path(destination)
        try:
            response = self.http.get(self.session.object_url(key), headers=self._headers(), stream=True)
        except requests.exceptions.RequestException as exc:
            raise TransferError(f"Error downloading object '{key}': {exc}") from exc
        with response:
            _ensure_success(response, "downloading", key)
            destination.parent.mkdir(parents=True, exist_ok=True)
            written = 0
            try:
                with open(destination, "wb") as fh:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        fh.write(chunk)
                        written += len(chunk)
            except requests.exceptions.RequestException as exc:
                raise TransferError(f"Error downloading object '{key}' to '{destination}': {exc}") from exc
        return written

    def delete_object(self, key: str) -> None:
        try:
            response = self.http.delete(self.session.object_url(key), headers=self._headers())
        except requests.exceptions.RequestException as exc:
            raise TransferError(f"Error deleting object '{key}': {exc}") from exc
        with response:
            _ensure_success(response, "deleting", key)
