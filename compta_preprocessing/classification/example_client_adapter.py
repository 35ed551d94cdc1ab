"""Example classification client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseClassificationClient and register the provider in ClassifierFactory.
"""

import json
from typing import ClassVar

from compta_preprocessing.classification.client_base import BaseClassificationClient


class ExampleClientAdapter(BaseClassificationClient):
    """Adapter that answers every request with "nothing relevant found".

    No network calls. Useful for local development and tests: a run with this
    client classifies every document as having zero relevant pages.
    """

    DOCUMENT_RESPONSE: ClassVar[dict[str, object]] = {
        "year": None,
        "relevantPages": [],
        "summary": "Example adapter: no pages analysed",
    }
    PAGE_RESPONSE: ClassVar[dict[str, object]] = {
        "statementType": "other",
        "year": None,
        "confidence": 0.0,
        "reasoning": "Example adapter",
    }

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
        _ = model, temperature, system_prompt, user_prompt, json_schema, document, document_name
        if schema_name == "page_classification":
            return json.dumps(self.PAGE_RESPONSE)
        return json.dumps(self.DOCUMENT_RESPONSE)
