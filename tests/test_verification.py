import base64
import unittest

import httpx
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from models_extension.errors import AuthenticationError
from models_extension.verification import GitHubSignatureVerifier

BODY = b'{"messages":[{"role":"user","content":"hi"}]}'


class GitHubSignatureVerifierTests(unittest.TestCase):
    def setUp(self) -> None:
        self.private_key = ec.generate_private_key(ec.SECP256R1())
        pem = self.private_key.public_key().public_bytes(
            serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
        )
        self.requests: list[httpx.Request] = []
        keys = {
            "public_keys": [
                {"key_identifier": "key-1", "key": pem.decode("utf-8"), "is_current": True}
            ]
        }

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return httpx.Response(200, json=keys)

        self.verifier = GitHubSignatureVerifier(
            http_client=httpx.Client(transport=httpx.MockTransport(handler))
        )

    def _sign(self, body: bytes) -> str:
        signature = self.private_key.sign(body, ec.ECDSA(hashes.SHA256()))
        return base64.b64encode(signature).decode("ascii")

    def test_valid_signature_passes(self) -> None:
        self.verifier.verify(BODY, self._sign(BODY), "key-1", "user-token")

        self.assertEqual(self.requests[0].headers["Authorization"], "Bearer user-token")

    def test_tampered_body_is_rejected(self) -> None:
        signature = self._sign(BODY)

        with self.assertRaises(AuthenticationError):
            self.verifier.verify(BODY + b" ", signature, "key-1", "user-token")

    def test_unknown_key_identifier_is_rejected(self) -> None:
        with self.assertRaisesRegex(AuthenticationError, "Unknown verification key"):
            self.verifier.verify(BODY, self._sign(BODY), "key-2", "user-token")

    def test_missing_signature_is_rejected_without_fetching_keys(self) -> None:
        with self.assertRaises(AuthenticationError):
            self.verifier.verify(BODY, "", "key-1", "user-token")

        self.assertEqual(self.requests, [])

    def test_garbled_signature_is_rejected(self) -> None:
        with self.assertRaises(AuthenticationError):
            self.verifier.verify(BODY, "not base64!", "key-1", "user-token")

    def test_key_endpoint_failure_is_rejected(self) -> None:
        verifier = GitHubSignatureVerifier(
            http_client=httpx.Client(
                transport=httpx.MockTransport(lambda request: httpx.Response(500))
            )
        )

        with self.assertRaises(AuthenticationError):
            verifier.verify(BODY, self._sign(BODY), "key-1", "user-token")


if __name__ == "__main__":
    unittest.main()
