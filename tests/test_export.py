from pathlib import Path

from api_tester.parser.export import EXPORT_TITLE, descriptors_to_openapi, endpoint_path
from api_tester.parser.loader import load_document_file
from api_tester.parser.openapi import convert

FIXTURES = Path(__file__).parent / "fixtures"


def _export():
    apis = convert(load_document_file(FIXTURES / "petstore.yaml"), source_origin="https://petstore.example.com")
    return descriptors_to_openapi(apis)


class TestExport:
    def test_paths_and_methods(self):
        document = _export()
        assert document["info"]["title"] == EXPORT_TITLE
        assert set(document["paths"]) == {"/api/v3/pets", "/api/v3/pets/{petId}"}
        assert set(document["paths"]["/api/v3/pets/{petId}"]) == {"get", "put", "delete"}

    def test_parameters_and_body_separated(self):
        document = _export()
        get_pets = document["paths"]["/api/v3/pets"]["get"]
        assert [(p["name"], p["in"]) for p in get_pets["parameters"]] == [("limit", "query"), ("status", "query")]
        assert get_pets["parameters"][0]["schema"]["type"] == "integer"
        assert "requestBody" not in get_pets

        post_pets = document["paths"]["/api/v3/pets"]["post"]
        schema = post_pets["requestBody"]["content"]["application/json"]["schema"]
        assert schema["required"] == ["name"]
        assert schema["properties"]["toys"]["items"]["properties"]["count"]["type"] == "integer"
        assert schema["properties"]["size"]["enum"] == ["small", "medium", "large"]

    def test_security_schemes(self):
        document = _export()
        post_pets = document["paths"]["/api/v3/pets"]["post"]
        (name,) = post_pets["security"][0]
        assert document["components"]["securitySchemes"][name] == {
            "type": "apiKey",
            "name": "api_key",
            "in": "query",
        }

    def test_reimport_keeps_fields(self):
        document = _export()
        document["servers"] = [{"url": "https://petstore.example.com"}]
        apis = {a.id: a for a in convert(document)}
        assert [f.name for f in apis["createpets"].fields][:3] == ["name", "birthday", "notes"]
        assert apis["createpets"].auth.key_location == "query"
        assert apis["showpetbyid"].fields[0].required is True


class TestEndpointPath:
    def test_absolute_and_relative(self):
        assert endpoint_path("https://a.test/v1/pets") == "/v1/pets"
        assert endpoint_path("/pets?x=1") == "/pets"
