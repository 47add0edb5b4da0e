"""Client for the model catalog that backs the extension's capabilities."""

import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from .constants import HTTP_TIMEOUT_SECONDS, MODEL_CATALOG_URL
from .errors import ExecutionError, NotFoundError
from .schemas import CatalogModel, ModelSummary

logger = logging.getLogger(__name__)

_CATALOG_ADAPTER = TypeAdapter(list[CatalogModel])


class ModelCatalogClient:
    """Read-only view of the model catalog scoped to one user token.

    The listing is fetched lazily and kept for the lifetime of the client,
    which is a single request.
    """

    def __init__(
        self,
        token: str,
        http_client: httpx.Client | None = None,
        catalog_url: str = MODEL_CATALOG_URL,
    ) -> None:
        self._token = token
        self._http_client = http_client
        self._catalog_url = catalog_url
        self._models: list[CatalogModel] | None = None

    def list_models(self) -> list[CatalogModel]:
        if self._models is None:
            self._models = self._fetch_models()
        return self._models

    def get_model(self, model_name: str) -> CatalogModel:
        for model in self.list_models():
            if model.matches(model_name):
                return model
        raise NotFoundError(f"Model not found in catalog: {model_name}")

    def summaries(self) -> list[ModelSummary]:
        return [model.summary_view() for model in self.list_models()]

    def _fetch_models(self) -> list[CatalogModel]:
        headers = {"Authorization": f"Bearer {self._token}", "Accept": "application/json"}
        client = self._http_client or httpx.Client(timeout=HTTP_TIMEOUT_SECONDS)
        try:
            response = client.get(self._catalog_url, headers=headers)
            response.raise_for_status()
            models = _CATALOG_ADAPTER.validate_json(response.content)
        except httpx.HTTPError as e:
            logger.exception("Model catalog request failed", extra={"url": self._catalog_url})
            raise ExecutionError("Model catalog request failed") from e
        except ValidationError as e:
            logger.exception("Model catalog returned an unexpected payload")
            raise ExecutionError("Model catalog returned an unexpected payload") from e
        finally:
            if self._http_client is None:
                client.close()

        logger.info("Model catalog loaded", extra={"model_count": len(models)})
        return models
