import json
from pathlib import Path
from unittest.mock import patch

import yaml
from click.testing import CliRunner

from api_tester.cli import main
from api_tester.request.dispatch import ApiResponse, DispatchError

FIXTURES = Path(__file__).parent / "fixtures"


def _import(tmp_path, *extra):
    output = tmp_path / "apis.json"
    result = CliRunner().invoke(
        main,
        ["import", str(FIXTURES / "petstore.yaml"), "-o", str(output), "--origin", "https://petstore.example.com", *extra],
    )
    assert result.exit_code == 0, result.output
    return output


class TestCliImport:
    def test_import_writes_collection(self, tmp_path):
        output = _import(tmp_path)
        apis = json.loads(output.read_text(encoding="utf-8"))
        assert len(apis) == 5
        assert apis[0]["endpoint"] == "https://petstore.example.com/api/v3/pets"
        assert apis[0]["fields"][0]["paramLocation"] == "query"

    def test_import_selected_paths(self, tmp_path):
        output = _import(tmp_path, "--path", "POST /pets")
        apis = json.loads(output.read_text(encoding="utf-8"))
        assert [a["id"] for a in apis] == ["createpets"]

    def test_import_from_url(self, tmp_path):
        document = yaml.safe_load((FIXTURES / "petstore.yaml").read_text(encoding="utf-8"))
        output = tmp_path / "apis.json"
        with patch("api_tester.cli.fetch_document", return_value=document) as fetch:
            result = CliRunner().invoke(
                main, ["import", "https://petstore.example.com/spec/openapi.yaml", "-o", str(output)]
            )

        assert result.exit_code == 0, result.output
        fetch.assert_called_once()
        apis = json.loads(output.read_text(encoding="utf-8"))
        assert apis[0]["endpoint"] == "https://petstore.example.com/api/v3/pets"

    def test_import_invalid_document(self, tmp_path):
        doc = tmp_path / "doc.yaml"
        doc.write_text("openapi: 3.0.0\ninfo: {}\n")
        result = CliRunner().invoke(main, ["import", str(doc), "-o", str(tmp_path / "out.json")])
        assert result.exit_code != 0
        assert "paths" in result.output

    def test_import_nothing_selected(self, tmp_path):
        result = CliRunner().invoke(
            main,
            ["import", str(FIXTURES / "petstore.yaml"), "-o", str(tmp_path / "o.json"), "--path", "GET /nope"],
        )
        assert result.exit_code != 0
        assert "No importable APIs" in result.output


class TestCliList:
    def test_grouped_by_tag(self, tmp_path):
        output = _import(tmp_path)
        result = CliRunner().invoke(main, ["list", str(output)])
        assert result.exit_code == 0
        assert "pets:" in result.output
        assert "Sonstige:" in result.output
        assert "listpets" in result.output


class TestCliRequest:
    def test_dry_run_prints_assembly(self, tmp_path):
        output = _import(tmp_path)
        result = CliRunner().invoke(
            main,
            ["request", str(output), "listpets", "-v", "limit=5", "-v", "status=available", "-v", "status=sold"],
        )
        assert result.exit_code == 0, result.output
        printed = json.loads(result.output)
        assert printed["method"] == "GET"
        assert printed["finalEndpoint"] == (
            "https://petstore.example.com/api/v3/pets?limit=5&status=available&status=sold"
        )

    def test_values_file_and_api_key(self, tmp_path):
        output = _import(tmp_path)
        values = tmp_path / "values.json"
        values.write_text(json.dumps({"name": "Fido", "toys": [{"label": "ball", "count": 1}]}))
        result = CliRunner().invoke(
            main, ["request", str(output), "createpets", "--values", str(values), "--api-key", "k"]
        )
        assert result.exit_code == 0, result.output
        printed = json.loads(result.output)
        assert printed["finalEndpoint"].endswith("/pets?api_key=k")
        assert printed["bodyPayload"] == {"name": "Fido", "toys": [{"label": "ball", "count": 1}]}

    def test_validation_errors(self, tmp_path):
        output = _import(tmp_path)
        result = CliRunner().invoke(main, ["request", str(output), "createpets", "-v", "name=F"])
        assert result.exit_code != 0
        assert "Validation failed" in result.output

    def test_unknown_api(self, tmp_path):
        output = _import(tmp_path)
        result = CliRunner().invoke(main, ["request", str(output), "nope"])
        assert result.exit_code != 0
        assert "Unknown API id" in result.output

    def test_variables_resolved_before_validation(self, tmp_path):
        output = _import(tmp_path)
        result = CliRunner().invoke(
            main, ["request", str(output), "listpets", "-v", "limit={{lim}}", "--var", "lim=10"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["finalEndpoint"].endswith("/pets?limit=10")

    def test_invalid_object_item(self, tmp_path):
        output = _import(tmp_path)
        result = CliRunner().invoke(
            main, ["request", str(output), "createpets", "-v", "name=Fido", "-v", "toys={broken"]
        )
        assert result.exit_code == 2
        assert "not valid JSON" in result.output

    def test_values_file_must_be_object(self, tmp_path):
        output = _import(tmp_path)
        values = tmp_path / "values.json"
        values.write_text("[1, 2]")
        result = CliRunner().invoke(main, ["request", str(output), "createpets", "--values", str(values)])
        assert result.exit_code == 1
        assert "expected a JSON object" in result.output

    @patch("api_tester.cli.send")
    def test_send(self, mock_send, tmp_path):
        mock_send.return_value = ApiResponse(
            ok=True, status=200, status_text="OK", data={"id": 7}, headers={}, duration_ms=12
        )
        output = _import(tmp_path)
        result = CliRunner().invoke(
            main, ["request", str(output), "showpetbyid", "-v", "petId=7", "--token", "t", "--send", "--direct"]
        )

        assert result.exit_code == 0, result.output
        assembly, method, options = mock_send.call_args.args
        assert method == "GET"
        assert assembly.final_endpoint == "https://petstore.example.com/api/v3/pets/7"
        assert options.use_proxy is False
        assert "200 OK (12 ms)" in result.output

    @patch("api_tester.cli.send", side_effect=DispatchError("Request timeout after 30.0 s"))
    def test_send_failure(self, mock_send, tmp_path):
        output = _import(tmp_path)
        result = CliRunner().invoke(main, ["request", str(output), "listpets", "--send"])
        assert result.exit_code != 0
        assert "Request timeout" in result.output


class TestCliExport:
    def test_export_yaml(self, tmp_path):
        output = _import(tmp_path)
        target = tmp_path / "export" / "openapi.yaml"
        result = CliRunner().invoke(main, ["export", str(output), "-o", str(target)])
        assert result.exit_code == 0, result.output
        document = yaml.safe_load(target.read_text(encoding="utf-8"))
        assert "/api/v3/pets" in document["paths"]
        assert "Exported 2 paths" in result.output
