"""Send an assembled request, directly or through the CORS relay."""

import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel

from api_tester.logging import redact_payload, redact_url
from api_tester.parser.base import APIDescriptor, RequestAssembly
from api_tester.settings import RequestOptions, get_settings

logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH")


class DispatchError(Exception):
    pass


class ApiResponse(BaseModel):
    ok: bool
    status: int
    status_text: str
    data: Any
    headers: dict[str, str]
    duration_ms: int


def request_headers(
    assembly: RequestAssembly,
    method: str,
    options: RequestOptions,
    api: APIDescriptor | None = None,
) -> dict[str, str]:
    """Accept, Content-Type (only with a body) and the routed headers.

    ``accept`` and ``content_type`` set on ``api`` win over ``options``.
    """
    accept = (api and api.accept) or options.accept
    content_type = (api and api.content_type) or options.content_type
    headers: dict[str, str] = {}
    if accept:
        headers["Accept"] = accept
    if method.upper() in BODY_METHODS and assembly.body_payload:
        headers["Content-Type"] = content_type
    headers.update(assembly.headers)
    return headers


def send(
    assembly: RequestAssembly,
    method: str,
    options: RequestOptions | None = None,
    client: httpx.Client | None = None,
    api: APIDescriptor | None = None,
) -> ApiResponse:
    """Perform the request and return the parsed response."""
    options = options or get_settings()
    method = method.upper()
    headers = request_headers(assembly, method, options, api)
    body = assembly.body_payload if method in BODY_METHODS else None

    logger.info(
        "%s %s via %s headers=%s",
        method,
        redact_url(assembly.final_endpoint),
        "proxy" if options.use_proxy else "direct",
        redact_payload(headers),
    )
    if body:
        logger.debug("body=%s", redact_payload(body))

    owns_client = client is None
    client = client or httpx.Client(timeout=options.timeout_seconds)
    started = time.monotonic()
    try:
        if options.use_proxy:
            response = client.post(
                options.proxy_url,
                json={"url": assembly.final_endpoint, "method": method, "headers": headers, "body": body},
            )
        else:
            response = client.request(
                method,
                assembly.final_endpoint,
                headers=headers,
                json=body,
            )
    except httpx.TimeoutException as e:
        raise DispatchError(f"Request timeout after {options.timeout_seconds} s") from e
    except httpx.HTTPError as e:
        raise DispatchError(str(e)) from e
    finally:
        if owns_client:
            client.close()

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info("%s %s -> %s in %d ms", method, redact_url(assembly.final_endpoint), response.status_code, duration_ms)

    return ApiResponse(
        ok=response.is_success,
        status=response.status_code,
        status_text=response.reason_phrase,
        data=_parse_body(response),
        headers=dict(response.headers),
        duration_ms=duration_ms,
    )


def _parse_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
