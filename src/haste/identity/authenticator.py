from __future__ import annotations

import requests
from pydantic import ValidationError

from haste.errors import AuthenticationError, EndpointNotFoundError
from haste.identity.models import AccessResponse, ApiKeyCredentials
from haste.logging_config import get_logger
from haste.storage.session import Session

logger = get_logger(__name__)


def authenticate(
    credentials: ApiKeyCredentials,
    region: str,
    identity_url: str,
    http: requests.Session,
) -> Session:
    """Exchange credentials for a token and the object-store endpoint of ``region``.

    The returned session has no container; callers bind one with
    :meth:`Session.with_container`. Nothing here is retried.

    Raises:
        AuthenticationError: transport failure, non-200 status or an
            unparseable response.
        EndpointNotFoundError: the catalog has no object-store endpoint whose
            region matches ``region`` exactly.
    """
    try:
        response = http.post(identity_url, json=credentials.to_auth_document())
    except requests.exceptions.RequestException as exc:
        raise AuthenticationError(f"Unable to authenticate: {exc}") from exc

    try:
        if response.status_code != 200:
            raise AuthenticationError(f"Unable to authenticate: status={response.status_code}")
        try:
            access = AccessResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AuthenticationError(f"Unable to parse identity response: {exc}") from exc
    finally:
        response.close()

    endpoint = access.object_store_endpoint(region)
    if not endpoint:
        raise EndpointNotFoundError(region)

    logger.info("Authenticated: username=%s region=%s endpoint=%s", credentials.username, region, endpoint)
    return Session(token=access.access.token.id, endpoint=endpoint, region=region)
