"""CLI entry point for api-tester."""

import json
from pathlib import Path

import click
import yaml
from pydantic import TypeAdapter, ValidationError

from api_tester.logging import configure_logging
from api_tester.parser.base import APIDescriptor, AuthSecret, FormField
from api_tester.parser.export import descriptors_to_openapi
from api_tester.parser.loader import (
    DocumentLoadError,
    fetch_document,
    is_openapi,
    is_url,
    load_document_file,
    source_origin,
)
from api_tester.parser.openapi import InvalidDocumentError, convert
from api_tester.request.builder import build_request, check_request
from api_tester.request.dispatch import DispatchError, send
from api_tester.settings import RequestOptions, get_settings

_DESCRIPTORS = TypeAdapter(list[APIDescriptor])


def _load_descriptors(path: Path) -> list[APIDescriptor]:
    try:
        return _DESCRIPTORS.validate_python(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValidationError) as e:
        raise click.ClickException(f"Invalid API collection {path}: {e}") from e


def _dump_json(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def _parse_pairs(pairs: tuple[str, ...], option: str) -> list[tuple[str, str]]:
    result = []
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {pair!r}", param_hint=option)
        result.append((name, value))
    return result


def _coerce(field: FormField | None, raw: list[str]):
    """Turn command line strings into the value type the field expects."""
    if field is not None and field.kind == "array":
        if field.item_kind == "number":
            return [_number(v) for v in raw]
        if field.item_kind == "object":
            return [_json_item(field.name, v) for v in raw]
        return raw
    value = raw[-1]
    if field is None:
        return value
    if field.kind == "number":
        return _number(value)
    if field.kind == "boolean-select" and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return value


def _json_item(name: str, raw: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{name}: item is not valid JSON: {raw!r}", param_hint="--value") from e


def _load_values(path: Path) -> dict:
    try:
        values = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid values file {path}: {e}") from e
    if not isinstance(values, dict):
        raise click.ClickException(f"Invalid values file {path}: expected a JSON object")
    return values


def _number(value: str):
    try:
        return int(value)
    except ValueError:
        try:
            return float(value)
        except ValueError:
            return value


@click.group()
@click.option("--log-level", default=None, help="Logging level (default from API_TESTER_LOG_LEVEL).")
def main(log_level: str | None):
    """API Tester: turn OpenAPI documents into request forms and send them."""
    configure_logging(log_level or get_settings().log_level)


@main.command("import")
@click.argument("source")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output file for the API collection JSON.")
@click.option("--origin", default=None, help="Origin for relative server URLs (default: origin of SOURCE if it is a URL).")
@click.option("--base-url", default=None, help="Use this base URL instead of the document's servers.")
@click.option("--path", "paths", multiple=True, help='Only import these operations, e.g. "GET /pets".')
def import_apis(source: str, output: Path, origin: str | None, base_url: str | None, paths: tuple[str, ...]):
    """Convert an OpenAPI document (file or URL) into an API collection."""
    click.echo(f"Loading {source}...")
    try:
        if is_url(source):
            document = fetch_document(source, timeout=get_settings().timeout_seconds)
            origin = origin or source_origin(source)
        else:
            document = load_document_file(Path(source))
        if not is_openapi(document):
            click.echo("Warning: document declares no OpenAPI version", err=True)
        apis = convert(document, source_origin=origin, base_url=base_url, selected_paths=list(paths) or None)
    except (OSError, DocumentLoadError, InvalidDocumentError) as e:
        raise click.ClickException(f"Import failed: {e}") from e

    if not apis:
        raise click.ClickException("No importable APIs found")

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(_dump_json([api.to_json_dict() for api in apis]), encoding="utf-8")
    click.echo(f"Imported {len(apis)} APIs into {output}")


@main.command("list")
@click.argument("collection", type=click.Path(exists=True, path_type=Path))
def list_apis(collection: Path):
    """List the APIs of a collection grouped by tag."""
    groups: dict[str, list[APIDescriptor]] = {}
    for api in _load_descriptors(collection):
        groups.setdefault(api.tag, []).append(api)

    for tag, apis in groups.items():
        click.echo(f"{tag}:")
        for api in apis:
            click.echo(f"  {api.id:<30} {api.method:<7} {api.endpoint}")


@main.command("request")
@click.argument("collection", type=click.Path(exists=True, path_type=Path))
@click.argument("api_id")
@click.option("-v", "--value", "pairs", multiple=True, help="Field value as NAME=VALUE (repeat for arrays).")
@click.option("--values", "values_file", type=click.Path(exists=True, path_type=Path), help="JSON file with field values.")
@click.option("--var", "var_pairs", multiple=True, help="Environment variable as NAME=VALUE for {{NAME}} placeholders.")
@click.option("--token", default=None, help="Bearer token.")
@click.option("--api-key", default=None, help="API key.")
@click.option("--send/--dry-run", "do_send", default=False, help="Send the request instead of only printing it.")
@click.option("--proxy/--direct", "use_proxy", default=None, help="Send through the CORS relay (default from settings).")
def request_api(
    collection: Path,
    api_id: str,
    pairs: tuple[str, ...],
    values_file: Path | None,
    var_pairs: tuple[str, ...],
    token: str | None,
    api_key: str | None,
    do_send: bool,
    use_proxy: bool | None,
):
    """Validate values for one API and build (or send) the request."""
    api = next((a for a in _load_descriptors(collection) if a.id == api_id), None)
    if api is None:
        raise click.ClickException(f"Unknown API id: {api_id}")

    values = _load_values(values_file) if values_file else {}
    by_name = {f.name: f for f in api.fields}
    collected: dict[str, list[str]] = {}
    for name, raw in _parse_pairs(pairs, "--value"):
        collected.setdefault(name, []).append(raw)
    for name, raw in collected.items():
        values[name] = _coerce(by_name.get(name), raw)

    variables = dict(_parse_pairs(var_pairs, "--var"))
    result = check_request(api, values, variables)
    if not result.valid:
        for name, message in result.errors.items():
            click.echo(f"  {name}: {message}", err=True)
        raise click.ClickException("Validation failed")

    secret = AuthSecret(token=token, api_key=api_key)
    assembly = build_request(api, values, secret, variables)
    click.echo(_dump_json({"method": api.method, **assembly.to_json_dict()}))

    if not do_send:
        return

    options = get_settings()
    if use_proxy is not None:
        options = RequestOptions(**{**options.model_dump(), "use_proxy": use_proxy})
    try:
        response = send(assembly, api.method, options, api=api)
    except DispatchError as e:
        raise click.ClickException(f"Request failed: {e}") from e

    click.echo(f"{response.status} {response.status_text} ({response.duration_ms} ms)")
    data = response.data
    click.echo(_dump_json(data) if isinstance(data, (dict, list)) else str(data))


@main.command("export")
@click.argument("collection", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output OpenAPI file (.yaml or .json).")
def export_apis(collection: Path, output: Path):
    """Export an API collection as an OpenAPI 3.0 document."""
    document = descriptors_to_openapi(_load_descriptors(collection))

    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix == ".json":
        output.write_text(_dump_json(document), encoding="utf-8")
    else:
        output.write_text(yaml.safe_dump(document, sort_keys=False, allow_unicode=True), encoding="utf-8")
    click.echo(f"Exported {len(document['paths'])} paths to {output}")
