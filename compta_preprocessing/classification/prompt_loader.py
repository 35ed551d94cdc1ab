import json
from dataclasses import dataclass
from pathlib import Path

from compta_preprocessing.classification.exceptions import ClassificationError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

DOCUMENT_STRUCTURE = "document_structure"
PAGE_TYPE = "page_type"


@dataclass(frozen=True)
class PromptBundle:
    """A prompt template and the JSON schema its answer must follow."""

    template: str
    json_schema: str

    @property
    def schema_dict(self) -> dict[str, object]:
        return json.loads(self.json_schema)

    def render(self, **values: object) -> str:
        return self.template.format(json_schema=self.json_schema, **values)


def load_prompt_template(name: str, prompt_dir: Path | None = None) -> str:
    """Load ``<name>_prompt.txt``.

    Raises:
        ClassificationError: if the file cannot be read.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / f"{name}_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ClassificationError(f"Failed to load prompt template: {exc}") from exc


def load_json_schema(name: str, prompt_dir: Path | None = None) -> str:
    """Load ``<name>_schema.json``.

    Raises:
        ClassificationError: if the file cannot be read or is not valid JSON.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / f"{name}_schema.json"
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ClassificationError(f"Failed to load JSON schema: {exc}") from exc
    try:
        json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ClassificationError(f"Invalid JSON schema in {path.name}: {exc}") from exc
    return raw


def load_prompt_bundle(name: str, prompt_dir: Path | None = None) -> PromptBundle:
    return PromptBundle(
        template=load_prompt_template(name, prompt_dir),
        json_schema=load_json_schema(name, prompt_dir),
    )
