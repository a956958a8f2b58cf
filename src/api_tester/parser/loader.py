"""Load OpenAPI documents from text, files or URLs."""

import json
from pathlib import Path
from urllib.parse import urlparse

import httpx
import yaml


class DocumentLoadError(ValueError):
    """The text is neither a JSON nor a YAML mapping."""


def load_document(text: str) -> dict:
    """Parse a JSON or YAML document into a mapping.

    JSON is tried first; anything that is not JSON goes through the
    YAML parser.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise DocumentLoadError("Could not parse document as JSON or YAML") from e

    if not isinstance(data, dict):
        raise DocumentLoadError("Document must be a JSON or YAML mapping")
    return data


def load_document_file(file_path: Path) -> dict:
    return load_document(file_path.read_text(encoding="utf-8"))


def fetch_document(url: str, client: httpx.Client | None = None, timeout: float = 30) -> dict:
    """Download and parse a document from ``url``."""
    owns_client = client is None
    client = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = client.get(url)
    except httpx.HTTPError as e:
        raise DocumentLoadError(f"Could not fetch {url}: {e}") from e
    finally:
        if owns_client:
            client.close()

    if response.status_code != 200:
        raise DocumentLoadError(f"HTTP {response.status_code}: {response.reason_phrase}")
    return load_document(response.text)


def source_origin(url: str) -> str | None:
    """``https://host:port`` part of a URL, or None for non-URLs."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def is_url(value: str) -> bool:
    return urlparse(value).scheme in ("http", "https")


def is_openapi(document: dict) -> bool:
    return "openapi" in document or "swagger" in document
