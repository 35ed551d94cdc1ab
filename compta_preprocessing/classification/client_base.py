from abc import ABC, abstractmethod


class BaseClassificationClient(ABC):
    """Contract for provider-specific document classification clients."""

    @abstractmethod
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
        """Send a PDF (whole document or single page) and return the raw text answer."""

    def ensure_configured(self) -> None:
        """Raise ConfigurationError when credentials required by the provider are missing."""
