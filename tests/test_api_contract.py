import json
import unittest
from contextlib import ExitStack
from unittest.mock import Mock, patch

from fakes import FakeChatClient, FakeStream, catalog_client, selection, text_chunk, tool_call
from fastapi.testclient import TestClient

import app as app_module
from models_extension.capabilities.registry import DEFAULT_REGISTRY
from models_extension.constants import (
    ACK_FRAME,
    DONE_FRAME,
    KEY_IDENTIFIER_HEADER,
    SIGNATURE_HEADER,
    TOKEN_HEADER,
)
from models_extension.errors import AuthenticationError
from models_extension.orchestration.direct import DirectExtensionOrchestrator
from models_extension.services.extension_service import ExtensionService
from models_extension.streaming import encode_event

SIGNED_HEADERS = {
    SIGNATURE_HEADER: "c2lnbmF0dXJl",
    KEY_IDENTIFIER_HEADER: "key-1",
    TOKEN_HEADER: "user-token",
}
PAYLOAD = json.dumps({"messages": [{"role": "user", "content": "using gpt-4o: say hi"}]})


class ApiContractTests(unittest.TestCase):
    def setUp(self) -> None:
        app_module.get_extension_service.cache_clear()
        app_module.get_request_verifier.cache_clear()
        self.verifier = Mock()
        self.chunks = [text_chunk(index, f"part {index}") for index in range(3)]

    def _patched(self, stack: ExitStack, service: object | None = None) -> Mock:
        stack.enter_context(
            patch.object(app_module, "get_request_verifier", return_value=self.verifier)
        )
        stack.enter_context(
            patch.object(app_module, "ensure_langsmith_configured", return_value=None)
        )
        flush_mock = stack.enter_context(
            patch.object(app_module, "flush_langsmith_traces", return_value=None)
        )
        if service is not None:
            stack.enter_context(
                patch.object(app_module, "get_extension_service", return_value=service)
            )
        return flush_mock

    def _service(self, copilot: FakeChatClient, inference: FakeChatClient) -> ExtensionService:
        return ExtensionService(
            registry=DEFAULT_REGISTRY,
            orchestrator=DirectExtensionOrchestrator(),
            create_copilot_client=lambda token: copilot,
            create_inference_client=lambda token: inference,
            create_catalog=lambda token: catalog_client(),
        )

    def test_health_endpoint(self) -> None:
        with TestClient(app_module.app) as client:
            response = client.get("/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, "OK")

    def test_unsigned_request_returns_401(self) -> None:
        with TestClient(app_module.app) as client:
            response = client.post("/", content=PAYLOAD, headers={TOKEN_HEADER: "user-token"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.text, "Unauthorized")

    def test_invalid_signature_returns_401_without_running_pipeline(self) -> None:
        self.verifier.verify.side_effect = AuthenticationError("Signature verification failed")
        service = Mock()

        with ExitStack() as stack:
            self._patched(stack, service)
            with TestClient(app_module.app) as client:
                response = client.post("/", content=PAYLOAD, headers=SIGNED_HEADERS)

        self.assertEqual(response.status_code, 401)
        service.open_stream.assert_not_called()

    def test_missing_token_returns_400(self) -> None:
        headers = {key: value for key, value in SIGNED_HEADERS.items() if key != TOKEN_HEADER}

        with ExitStack() as stack:
            self._patched(stack, Mock())
            with TestClient(app_module.app) as client:
                response = client.post("/", content=PAYLOAD, headers=headers)

        self.assertEqual(response.status_code, 400)

    def test_invalid_payload_returns_400(self) -> None:
        with ExitStack() as stack:
            self._patched(stack, Mock())
            with TestClient(app_module.app) as client:
                response = client.post("/", content='{"messages": []}', headers=SIGNED_HEADERS)

        self.assertEqual(response.status_code, 400)

    def test_streams_ack_chunks_and_done(self) -> None:
        copilot = FakeChatClient(
            selection_response=selection(
                tool_call("execute_model", '{"model": "gpt-4o", "instruction": "say hi"}')
            )
        )
        inference = FakeChatClient(stream=FakeStream(self.chunks))

        with ExitStack() as stack:
            flush_mock = self._patched(stack, self._service(copilot, inference))
            with TestClient(app_module.app) as client:
                response = client.post("/", content=PAYLOAD, headers=SIGNED_HEADERS)

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/event-stream"))
        expected = b"".join(
            [ACK_FRAME, *(encode_event(chunk) for chunk in self.chunks), DONE_FRAME]
        )
        self.assertEqual(response.content, expected)
        self.verifier.verify.assert_called_once_with(
            PAYLOAD.encode("utf-8"), "c2lnbmF0dXJl", "key-1", "user-token"
        )
        self.assertEqual(flush_mock.call_count, 1)

    def test_not_found_capability_returns_500_with_no_frames(self) -> None:
        copilot = FakeChatClient(
            selection_response=selection(tool_call("describe_model", '{"model": "llama-9000"}'))
        )
        inference = FakeChatClient(stream=FakeStream(self.chunks))

        with ExitStack() as stack:
            flush_mock = self._patched(stack, self._service(copilot, inference))
            with TestClient(app_module.app) as client:
                response = client.post("/", content=PAYLOAD, headers=SIGNED_HEADERS)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.text, "Internal Server Error")
        self.assertNotIn("data:", response.text)
        self.assertEqual(inference.calls, [])
        self.assertEqual(flush_mock.call_count, 1)

    def test_unexpected_error_returns_opaque_500(self) -> None:
        service = Mock()
        service.open_stream.side_effect = RuntimeError("selector exploded: secret detail")

        with ExitStack() as stack:
            self._patched(stack, service)
            with TestClient(app_module.app, raise_server_exceptions=False) as client:
                response = client.post("/", content=PAYLOAD, headers=SIGNED_HEADERS)

        self.assertEqual(response.status_code, 500)
        self.assertNotIn("secret detail", response.text)


if __name__ == "__main__":
    unittest.main()
