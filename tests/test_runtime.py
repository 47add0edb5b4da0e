import os
import unittest
from unittest.mock import patch

from models_extension.constants import COPILOT_API_BASE_URL, MODELS_INFERENCE_BASE_URL
from models_extension.infra import runtime


class RuntimeTests(unittest.TestCase):
    def setUp(self) -> None:
        runtime.get_settings.cache_clear()

    def tearDown(self) -> None:
        runtime.get_settings.cache_clear()

    def test_settings_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = runtime.get_settings()

        self.assertEqual(settings.port, 3000)
        self.assertEqual(settings.orchestrator, "direct")
        self.assertEqual(settings.log_level, "INFO")
        self.assertIsNone(settings.langsmith_api_key)

    def test_settings_read_environment(self) -> None:
        environ = {"PORT": "8080", "EXTENSION_ORCHESTRATOR": "LangGraph", "LOG_LEVEL": "debug"}
        with patch.dict(os.environ, environ, clear=True):
            settings = runtime.get_settings()

        self.assertEqual(settings.port, 8080)
        self.assertEqual(settings.orchestrator, "langgraph")
        self.assertEqual(settings.log_level, "DEBUG")

    def test_unknown_orchestrator_is_rejected(self) -> None:
        with patch.dict(os.environ, {"EXTENSION_ORCHESTRATOR": "parallel"}, clear=True):
            with self.assertRaisesRegex(RuntimeError, "parallel"):
                runtime.get_settings()

    def test_langsmith_enabled_only_with_api_key(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            runtime._configure_langsmith("ls-key")
            self.assertEqual(os.environ["LANGSMITH_TRACING"], "true")
            self.assertEqual(os.environ["LANGSMITH_API_KEY"], "ls-key")
            self.assertEqual(os.environ["LANGSMITH_PROJECT"], "models-extension")

            runtime._configure_langsmith(None)
            self.assertNotIn("LANGSMITH_TRACING", os.environ)

    def test_clients_target_their_base_urls(self) -> None:
        copilot = runtime.create_copilot_client("user-token")
        inference = runtime.create_inference_client("user-token")

        self.assertEqual(str(copilot.base_url).rstrip("/"), COPILOT_API_BASE_URL)
        self.assertEqual(str(inference.base_url).rstrip("/"), MODELS_INFERENCE_BASE_URL)
        self.assertEqual(copilot.api_key, "user-token")


if __name__ == "__main__":
    unittest.main()
