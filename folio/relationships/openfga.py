"""OpenFGA implementation of the relationship store.

Thin adapter over the synchronous ``openfga_sdk`` client: converts
``RelationshipTuple`` to SDK request models and SDK exceptions to
``RelationshipStoreError``. Transport failures from urllib3 (refused
connections, timeouts) are translated the same way. The SDK's own retry
loop is switched off; the coordinator surfaces failures immediately.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import urllib3.exceptions
from openfga_sdk.client import ClientConfiguration
from openfga_sdk.client.models import (
    ClientCheckRequest,
    ClientListObjectsRequest,
    ClientTuple,
    ClientWriteRequest,
)
from openfga_sdk.configuration import RetryParams
from openfga_sdk.credentials import CredentialConfiguration, Credentials
from openfga_sdk.exceptions import OpenApiException
from openfga_sdk.sync import OpenFgaClient

from ..core.config import Settings
from .protocols import RelationshipStoreError
from .tuples import RelationshipTuple

logger = logging.getLogger(__name__)

# SDK errors for rejected requests, urllib3 errors for ones that never got an answer.
_STORE_ERRORS = (OpenApiException, urllib3.exceptions.HTTPError)


def build_client_configuration(settings: Settings) -> ClientConfiguration:
    """Translate FGA_* settings into an SDK configuration.

    Client credentials are only attached when FGA_CLIENT_ID is set, so a
    local OpenFGA server without auth works with just the URL and store id.
    """
    credentials: Optional[Credentials] = None
    if settings.fga_client_id:
        credentials = Credentials(
            method="client_credentials",
            configuration=CredentialConfiguration(
                api_issuer=settings.fga_api_token_issuer,
                api_audience=settings.fga_api_audience,
                client_id=settings.fga_client_id,
                client_secret=settings.fga_client_secret,
            ),
        )

    return ClientConfiguration(
        api_url=settings.fga_api_url,
        store_id=settings.fga_store_id,
        authorization_model_id=settings.fga_authorization_model_id or None,
        credentials=credentials,
        retry_params=RetryParams(max_retry=0),
    )


class OpenFgaRelationshipStore:
    """RelationshipStore backed by an OpenFGA server."""

    def __init__(self, client: OpenFgaClient):
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenFgaRelationshipStore":
        return cls(OpenFgaClient(build_client_configuration(settings)))

    def write(self, tuples: Sequence[RelationshipTuple]) -> None:
        if not tuples:
            return
        body = ClientWriteRequest(
            writes=[
                ClientTuple(user=t.subject, relation=t.relation, object=t.object)
                for t in tuples
            ],
        )
        try:
            self._client.write(body)
        except _STORE_ERRORS as e:
            raise RelationshipStoreError("write", str(e)) from e

    def check(self, tuple_key: RelationshipTuple) -> bool:
        body = ClientCheckRequest(
            user=tuple_key.subject,
            relation=tuple_key.relation,
            object=tuple_key.object,
        )
        try:
            response = self._client.check(body)
        except _STORE_ERRORS as e:
            raise RelationshipStoreError("check", str(e)) from e
        return bool(response.allowed)

    def list_objects(self, object_type: str, relation: str, subject: str) -> list[str]:
        body = ClientListObjectsRequest(user=subject, relation=relation, type=object_type)
        try:
            response = self._client.list_objects(body)
        except _STORE_ERRORS as e:
            raise RelationshipStoreError("list_objects", str(e)) from e
        return list(response.objects or [])

    def close(self) -> None:
        try:
            self._client.close()
        except _STORE_ERRORS as e:
            logger.warning("Failed to close OpenFGA client: %s", e)
