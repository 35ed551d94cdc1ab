import json

from compta_preprocessing.classification.example_client_adapter import ExampleClientAdapter


def _call(schema_name: str) -> dict[str, object]:
    raw = ExampleClientAdapter().create_completion(
        model="example",
        temperature=0.0,
        system_prompt="s",
        user_prompt="u",
        json_schema={},
        schema_name=schema_name,
        document=b"%PDF",
        document_name="COMPTA.pdf",
    )
    return json.loads(raw)


class TestExampleClientAdapter:
    def test_document_response_has_no_pages(self) -> None:
        data = _call("document_structure")
        assert data["relevantPages"] == []
        assert data["year"] is None

    def test_page_response_is_other(self) -> None:
        data = _call("page_classification")
        assert data["statementType"] == "other"
