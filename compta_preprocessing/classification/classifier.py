"""AI-powered document structure classifier."""

import json
from typing import Any

from compta_preprocessing.classification.base import BaseStructureClassifier
from compta_preprocessing.classification.client_base import BaseClassificationClient
from compta_preprocessing.classification.exceptions import ClassificationError
from compta_preprocessing.classification.models import DocumentStructureAnalysis
from compta_preprocessing.classification.prompt_loader import (
    DOCUMENT_STRUCTURE,
    PromptBundle,
    load_prompt_bundle,
)
from compta_preprocessing.classification.validator import validate_and_build_structure
from compta_preprocessing.logging.logger import Log
from compta_preprocessing.registry.models import SourceDocument

_SYSTEM_PROMPT = "You classify pages of French accounting documents. Answer with JSON only."


class ModelClassifier(BaseStructureClassifier):
    """Shared plumbing for classifiers backed by an AI provider client."""

    def __init__(
        self,
        *,
        client: BaseClassificationClient,
        model: str,
        temperature: float = 0.2,
        min_confidence: float = 0.0,
        system_prompt: str = _SYSTEM_PROMPT,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(1.0, temperature))
        self._min_confidence = min_confidence
        self._system_prompt = system_prompt

    def ensure_configured(self) -> None:
        self._client.ensure_configured()

    def _call_ai(
        self,
        *,
        prompt: PromptBundle,
        user_prompt: str,
        schema_name: str,
        document: bytes,
        document_name: str,
    ) -> str:
        """Call the provider; the client enforces its own request timeout."""
        return self._client.create_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=user_prompt,
            json_schema=prompt.schema_dict,
            schema_name=schema_name,
            document=document,
            document_name=document_name,
        )

    @staticmethod
    def _parse_json(raw: str) -> dict[str, Any]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ClassificationError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise ClassificationError("JSON response must be an object")
        return parsed


class StructureClassifier(ModelClassifier):
    """Classifies a whole document in a single provider request."""

    def __init__(self, *, prompt: PromptBundle | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._prompt = prompt or load_prompt_bundle(DOCUMENT_STRUCTURE)

    def classify(self, document: SourceDocument) -> DocumentStructureAnalysis:
        user_prompt = self._prompt.render(filename=document.filename)
        Log.debug(f"Structure prompt:\n{user_prompt}")
        Log.info(
            f"Classifying {document.filename} ({len(document.content)} bytes)",
            model=self._model,
        )

        raw_response = self._call_ai(
            prompt=self._prompt,
            user_prompt=user_prompt,
            schema_name="document_structure",
            document=document.content,
            document_name=document.filename,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        analysis = validate_and_build_structure(
            self._parse_json(raw_response),
            min_confidence=self._min_confidence,
        )
        Log.info(
            f"Classified {document.filename}: year {analysis.fiscal_year}, "
            f"{len(analysis.relevant_pages)} relevant pages"
        )
        for page in analysis.relevant_pages:
            Log.debug(
                f"  page {page.page_number}: {page.statement_type.value} "
                f"(confidence {page.confidence})"
            )
        return analysis
