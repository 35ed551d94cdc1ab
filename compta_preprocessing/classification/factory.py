from typing import ClassVar

from compta_preprocessing.classification.base import BaseStructureClassifier
from compta_preprocessing.classification.classifier import StructureClassifier
from compta_preprocessing.classification.client_base import BaseClassificationClient
from compta_preprocessing.classification.example_client_adapter import ExampleClientAdapter
from compta_preprocessing.classification.keyword_classifier import KeywordStructureClassifier
from compta_preprocessing.classification.openai_client_adapter import OpenAIClientAdapter
from compta_preprocessing.classification.page_classifier import PageByPageClassifier
from compta_preprocessing.config.settings import Settings
from compta_preprocessing.pdf.factory import PdfExtractorFactory
from compta_preprocessing.pdf.page_extractor import PageExtractor


class ClassifierFactory:
    """Creates the configured structure classifier."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }
    KEYLESS_PROVIDERS: ClassVar[frozenset[str]] = frozenset({"ollama"})
    MODES: ClassVar[tuple[str, ...]] = ("document", "page")

    @classmethod
    def create(
        cls,
        settings: Settings,
        page_extractor: PageExtractor | None = None,
    ) -> BaseStructureClassifier:
        """Create a configured classifier from application settings.

        Credentials are not checked here; call ``ensure_configured`` on the
        result before classifying.
        """
        provider = settings.classifier_provider.lower()
        mode = settings.classifier_mode.lower()
        if mode not in cls.MODES:
            raise ValueError(
                f"Unknown classifier mode '{mode}'. Choose from: {list(cls.MODES)}"
            )

        if provider == "keyword":
            return KeywordStructureClassifier(PdfExtractorFactory.create(settings))

        if provider == "example":
            client: BaseClassificationClient = ExampleClientAdapter()
            model = "example"
            temperature = 0.0
        else:
            client = OpenAIClientAdapter(
                api_key=cls._resolve_api_key(provider, settings),
                timeout_seconds=min(
                    cls._resolve_timeout_seconds(provider, settings),
                    settings.classification_timeout_seconds,
                ),
                base_url=cls._resolve_base_url(provider, settings),
                provider=provider,
                requires_api_key=provider not in cls.KEYLESS_PROVIDERS,
            )
            model = cls._resolve_model_name(provider, settings)
            temperature = cls._resolve_temperature(provider, settings)

        options = {
            "client": client,
            "model": model,
            "temperature": temperature,
            "min_confidence": settings.min_page_confidence,
        }
        if mode == "page":
            return PageByPageClassifier(page_extractor=page_extractor, **options)
        return StructureClassifier(**options)

    @classmethod
    def supported_providers(cls) -> list[str]:
        return ["example", "keyword", "openai", "openai_compatible", *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS)]

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.classifier_openai_compatible_base_url or "").strip()
            if not url:
                raise ValueError(
                    "classifier_openai_compatible_base_url is required for "
                    "classifier_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        raise ValueError(
            f"Unknown classifier provider '{provider}'. Choose from: {cls.supported_providers()}"
        )

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.classifier_openai_api_key,
            "openai_compatible": settings.classifier_openai_compatible_api_key,
            "openrouter": settings.classifier_openrouter_api_key,
            "groq": settings.classifier_groq_api_key,
            "together": settings.classifier_together_api_key,
            "deepseek": settings.classifier_deepseek_api_key,
            "ollama": settings.classifier_ollama_api_key or "ollama",
        }
        return key_map.get(provider, "") or ""

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.classifier_openai_model_name,
            "openai_compatible": settings.classifier_openai_compatible_model_name,
            "openrouter": settings.classifier_openrouter_model_name,
            "groq": settings.classifier_groq_model_name,
            "together": settings.classifier_together_model_name,
            "deepseek": settings.classifier_deepseek_model_name,
            "ollama": settings.classifier_ollama_model_name,
        }
        return key_map.get(provider, "") or ""

    @classmethod
    def _resolve_timeout_seconds(cls, provider: str, settings: Settings) -> int:
        key_map = {
            "openai": settings.classifier_openai_timeout_seconds,
            "openai_compatible": settings.classifier_openai_compatible_timeout_seconds,
            "openrouter": settings.classifier_openrouter_timeout_seconds,
            "groq": settings.classifier_groq_timeout_seconds,
            "together": settings.classifier_together_timeout_seconds,
            "deepseek": settings.classifier_deepseek_timeout_seconds,
            "ollama": settings.classifier_ollama_timeout_seconds,
        }
        return key_map.get(provider, 60) or 60

    @classmethod
    def _resolve_temperature(cls, provider: str, settings: Settings) -> float:
        if provider == "openai":
            return settings.classifier_openai_temperature
        return 0.0
