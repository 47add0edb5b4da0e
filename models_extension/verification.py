"""Verification of signed agent requests against GitHub's published keys."""

import base64
import binascii
import logging
from typing import Protocol

import httpx
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .constants import COPILOT_PUBLIC_KEYS_URL, HTTP_TIMEOUT_SECONDS
from .errors import AuthenticationError

logger = logging.getLogger(__name__)


class RequestVerifier(Protocol):
    def verify(self, body: bytes, signature: str, key_identifier: str, token: str) -> None:
        """Raise AuthenticationError unless the body carries a valid signature."""
        ...


class GitHubSignatureVerifier:
    def __init__(
        self,
        http_client: httpx.Client | None = None,
        keys_url: str = COPILOT_PUBLIC_KEYS_URL,
    ) -> None:
        self._http_client = http_client
        self._keys_url = keys_url

    def verify(self, body: bytes, signature: str, key_identifier: str, token: str) -> None:
        if not signature or not key_identifier:
            raise AuthenticationError("Missing request signature")

        public_key = self._load_public_key(key_identifier, token)
        try:
            public_key.verify(base64.b64decode(signature), body, ec.ECDSA(hashes.SHA256()))
        except (InvalidSignature, binascii.Error) as e:
            raise AuthenticationError("Signature verification failed") from e

    def _load_public_key(self, key_identifier: str, token: str) -> ec.EllipticCurvePublicKey:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        client = self._http_client or httpx.Client(timeout=HTTP_TIMEOUT_SECONDS)
        try:
            response = client.get(self._keys_url, headers=headers)
            response.raise_for_status()
            keys = response.json().get("public_keys", [])
        except (httpx.HTTPError, ValueError) as e:
            logger.exception("Failed to fetch verification keys")
            raise AuthenticationError("Unable to fetch verification keys") from e
        finally:
            if self._http_client is None:
                client.close()

        for key in keys:
            if key.get("key_identifier") != key_identifier:
                continue
            try:
                public_key = serialization.load_pem_public_key(key["key"].encode("utf-8"))
            except (KeyError, ValueError) as e:
                raise AuthenticationError("Verification key is malformed") from e
            if not isinstance(public_key, ec.EllipticCurvePublicKey):
                raise AuthenticationError("Verification key is not an ECDSA key")
            return public_key

        raise AuthenticationError(f"Unknown verification key: {key_identifier}")
