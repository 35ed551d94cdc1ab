import base64

import httpx
import openai

from compta_preprocessing.classification.client_base import BaseClassificationClient
from compta_preprocessing.classification.exceptions import (
    ClassificationError,
    ClassificationNetworkError,
    ClassificationTimeoutError,
)
from compta_preprocessing.config.exceptions import ConfigurationError


class OpenAIClientAdapter(BaseClassificationClient):
    """Classification client built on the OpenAI-compatible chat API.

    The PDF travels as a base64 ``file`` content part next to the prompt.
    Each request is bounded by ``timeout_seconds`` and is not retried by the
    SDK; retries belong to the pipeline.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        base_url: str | None = None,
        provider: str = "openai",
        requires_api_key: bool = True,
    ) -> None:
        self._provider = provider
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._base_url = base_url
        self._requires_api_key = requires_api_key
        self._client: openai.OpenAI | None = None

    def ensure_configured(self) -> None:
        if self._requires_api_key and not self._api_key:
            raise ConfigurationError(
                f"API key for classifier provider '{self._provider}' is not configured"
            )

    def _get_client(self) -> openai.OpenAI:
        # The SDK rejects an empty key at construction time.
        if self._client is None:
            self.ensure_configured()
            self._client = openai.OpenAI(
                api_key=self._api_key,
                timeout=self._timeout_seconds,
                base_url=self._base_url,
                max_retries=0,
            )
        return self._client

    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
        schema_name: str,
        document: bytes,
        document_name: str,
    ) -> str:
        encoded = base64.b64encode(document).decode("ascii")
        try:
            response = self._get_client().chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema_name,
                        "strict": True,
                        "schema": json_schema,
                    },
                },
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "file",
                                "file": {
                                    "filename": document_name,
                                    "file_data": f"data:application/pdf;base64,{encoded}",
                                },
                            },
                            {"type": "text", "text": user_prompt},
                        ],
                    },
                ],
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise ClassificationTimeoutError(f"AI provider timed out: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise ClassificationNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ClassificationNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise ClassificationError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ClassificationError("AI returned empty response")
        return content
