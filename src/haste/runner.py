"""Run one bulk operation end to end: authenticate, enumerate, dispatch, wait."""

from __future__ import annotations

import itertools
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import requests

from haste.config.transfer_config import TransferConfig
from haste.engine.operations import DELETE, DOWNLOAD, UPLOAD, build_operation
from haste.engine.pool import WorkerPool
from haste.engine.report import TransferReport
from haste.errors import EmptySourceError
from haste.identity.authenticator import authenticate
from haste.identity.models import ApiKeyCredentials
from haste.logging_config import get_logger
from haste.sources.local import iter_local_keys
from haste.sources.remote import iter_container_names, iter_remote_keys
from haste.storage.http import create_http_session
from haste.storage.object_store import ObjectStore
from haste.storage.session import Session

logger = get_logger(__name__)


def _open_session(config: TransferConfig, http: requests.Session) -> Session:
    credentials = ApiKeyCredentials(username=config.username, api_key=config.api_key)
    return authenticate(credentials, config.region, config.identity_url, http)


def _require_first(keys: Iterator[str]) -> Iterator[str]:
    """Pull the first non-blank key so an empty source fails before any worker starts."""
    for key in keys:
        if key.strip():
            return itertools.chain([key], keys)
    raise EmptySourceError()


def _dispatch(config: TransferConfig, store: ObjectStore, mode: str, keys: Iterator[str], base_path=None) -> TransferReport:
    operation = build_operation(mode, store, base_path)
    pool = WorkerPool(operation, config.concurrency)
    logger.info(
        "Starting %s: container=%s workers=%s base_path=%s",
        mode,
        store.container,
        config.concurrency,
        base_path,
    )
    return pool.run(keys)


@contextmanager
def _http_client(config: TransferConfig, http: requests.Session | None) -> Iterator[requests.Session]:
    """Use the caller's client as is, or own one for the duration of the run."""
    if http is not None:
        yield http
        return
    with create_http_session(config.concurrency) as owned:
        yield owned


def run_upload(config: TransferConfig, source: str | Path, container: str, http: requests.Session | None = None) -> TransferReport:
    with _http_client(config, http) as client:
        session = _open_session(config, client).with_container(container)
        keys = _require_first(iter_local_keys(source))
        store = ObjectStore(session, client)
        store.create_container()
        return _dispatch(config, store, UPLOAD, keys, base_path=Path(source))


def run_download(config: TransferConfig, container: str, destination: str | Path, http: requests.Session | None = None) -> TransferReport:
    with _http_client(config, http) as client:
        session = _open_session(config, client).with_container(container)
        store = ObjectStore(session, client)
        keys = _require_first(iter_remote_keys(store))
        return _dispatch(config, store, DOWNLOAD, keys, base_path=Path(destination).resolve())


def run_delete(config: TransferConfig, container: str, http: requests.Session | None = None) -> TransferReport:
    with _http_client(config, http) as client:
        session = _open_session(config, client).with_container(container)
        store = ObjectStore(session, client)
        keys = _require_first(iter_remote_keys(store))
        return _dispatch(config, store, DELETE, keys)


def _close_when_exhausted(keys: Iterator[str], owned: requests.Session | None) -> Iterator[str]:
    try:
        yield from keys
    finally:
        if owned is not None:
            owned.close()


def list_keys(config: TransferConfig, container: str | None = None, http: requests.Session | None = None) -> Iterator[str]:
    """Object keys of ``container``, or the account's container names when it is None.

    Authentication and the first page happen before returning; the rest of
    the listing is fetched as the result is consumed. A client created here
    is closed once the result is exhausted or closed.
    """
    owned = None
    if http is None:
        http = owned = create_http_session(config.concurrency)
    try:
        session = _open_session(config, http)
        if container:
            keys = _require_first(iter_remote_keys(ObjectStore(session.with_container(container), http)))
        else:
            keys = _require_first(iter_container_names(ObjectStore(session, http)))
    except BaseException:
        if owned is not None:
            owned.close()
        raise
    return _close_when_exhausted(keys, owned)
