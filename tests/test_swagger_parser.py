import json
from pathlib import Path

import pytest

from api_change_detector.exceptions import DocumentShapeError
from api_change_detector.parser.swagger import load_document, parse_document

FIXTURES = Path(__file__).parent / "fixtures"


class TestLoadDocument:
    def test_load_petstore_yaml(self):
        doc = load_document(FIXTURES / "petstore-v1.yaml")
        assert doc is not None
        assert doc.title == "Swagger Petstore"
        assert doc.version == "1.0.0"
        assert list(doc.paths) == ["/pets", "/pets/{petId}", "/stores"]
        assert doc.operation_count == 5

    def test_path_level_parameters_are_not_an_operation(self):
        doc = load_document(FIXTURES / "petstore-v1.yaml")
        assert list(doc.paths["/pets"]) == ["get", "post"]

    def test_parse_get_pets(self):
        doc = load_document(FIXTURES / "petstore-v1.yaml")
        get_pets = doc.paths["/pets"]["get"]
        assert get_pets.summary == "List all pets"
        assert get_pets.description is None
        assert len(get_pets.parameters) == 1
        assert get_pets.parameters[0].name == "limit"
        assert get_pets.parameters[0].location == "query"
        assert get_pets.parameters[0].required is False

    def test_parse_response_schema(self):
        doc = load_document(FIXTURES / "petstore-v1.yaml")
        schema = doc.paths["/pets/{petId}"]["get"].responses["200"].extract_schema()
        assert schema["required"] == ["id", "name"]
        assert list(schema["properties"]) == ["id", "name", "tag"]

    def test_load_json(self, tmp_path):
        f = tmp_path / "apiDocs-all.json"
        f.write_text(json.dumps({"paths": {"/items": {"get": {"summary": "List items"}}}}))
        doc = load_document(f)
        assert doc.paths["/items"]["get"].summary == "List items"

    def test_missing_file_returns_none(self, tmp_path):
        assert load_document(tmp_path / "nope.yaml") is None

    def test_malformed_yaml_returns_none(self, tmp_path):
        f = tmp_path / "broken.yaml"
        f.write_text("paths:\n  /items: [unclosed\n")
        assert load_document(f) is None

    def test_malformed_json_returns_none(self, tmp_path):
        f = tmp_path / "broken.json"
        f.write_text('{"paths": {')
        assert load_document(f) is None

    def test_empty_file_returns_none(self, tmp_path):
        f = tmp_path / "empty.yaml"
        f.write_text("")
        assert load_document(f) is None

    def test_wrong_shape_raises(self, tmp_path):
        f = tmp_path / "list.yaml"
        f.write_text("- just\n- a list\n")
        with pytest.raises(DocumentShapeError):
            load_document(f)


class TestParseDocument:
    def test_methods_are_lowercased(self):
        doc = parse_document({"paths": {"/items": {"GET": {"summary": "List"}}}})
        assert list(doc.paths["/items"]) == ["get"]
        assert doc.paths["/items"]["get"].method == "get"

    def test_non_method_keys_are_skipped(self):
        doc = parse_document(
            {"paths": {"/items": {"summary": "Items", "servers": [], "parameters": [], "get": {}}}}
        )
        assert list(doc.paths["/items"]) == ["get"]

    def test_integer_status_codes_become_strings(self):
        doc = parse_document({"paths": {"/items": {"get": {"responses": {200: {"description": "OK"}}}}}})
        assert list(doc.paths["/items"]["get"].responses) == ["200"]

    def test_swagger2_bare_schema(self):
        doc = parse_document(
            {
                "swagger": "2.0",
                "paths": {
                    "/items": {
                        "get": {"responses": {"200": {"schema": {"properties": {"id": {"type": "integer"}}}}}}
                    }
                },
            }
        )
        schema = doc.paths["/items"]["get"].responses["200"].extract_schema()
        assert list(schema["properties"]) == ["id"]

    def test_ref_parameter_is_kept_unresolved(self):
        doc = parse_document({"paths": {"/items": {"get": {"parameters": [{"$ref": "#/components/parameters/Page"}]}}}})
        param = doc.paths["/items"]["get"].parameters[0]
        assert param.name == ""
        assert param.required is False

    def test_missing_paths_is_empty(self):
        assert parse_document({"openapi": "3.0.0"}).paths == {}

    def test_paths_must_be_a_mapping(self):
        with pytest.raises(DocumentShapeError):
            parse_document({"paths": ["/items"]})

    def test_operation_must_be_a_mapping(self):
        with pytest.raises(DocumentShapeError):
            parse_document({"paths": {"/items": {"get": "not an operation"}}})

    def test_parameters_must_be_a_list(self):
        with pytest.raises(DocumentShapeError):
            parse_document({"paths": {"/items": {"get": {"parameters": {"name": "page"}}}}})
