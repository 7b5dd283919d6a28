#!/usr/bin/env python3
"""
Request construction for model calls.

build_request() is pure: no I/O, and it never rejects query content. The
content is JSON-escaped into the body as-is.
"""

import json
import uuid
from types import MappingProxyType
from typing import Any, Dict

from modelcall.config.schemas import ClientConfig
from modelcall.llm.models import Query, WireRequest

TRACE_HEADER = "X-Request-ID"


def new_trace_id() -> str:
    """128-bit random identifier, hex encoded."""
    return uuid.uuid4().hex


def build_payload(query: Query, config: ClientConfig) -> Dict[str, Any]:
    """
    Build the chat completion body.

    Query options win over config defaults. max_tokens is omitted only when
    neither sets it.
    """
    temperature = query.temperature if query.temperature is not None else config.temperature
    max_tokens = query.max_tokens if query.max_tokens is not None else config.max_tokens

    payload = {
        "model": query.model or config.model,
        "temperature": float(temperature),
        "messages": [
            {"role": "user", "content": query.content}
        ],
    }

    if max_tokens is not None:
        payload["max_tokens"] = int(max_tokens)

    return payload


def auth_headers(config: ClientConfig) -> Dict[str, str]:
    if config.provider_type == "azure":
        return {"api-key": config.api_key}

    headers = {"Authorization": f"Bearer {config.api_key}"}
    if config.provider_type == "openrouter":
        if config.site_url:
            headers["HTTP-Referer"] = config.site_url
        headers["X-Title"] = config.site_name
    return headers


def build_request(query: Query, config: ClientConfig) -> WireRequest:
    trace_id = new_trace_id()

    fixed = auth_headers(config)
    fixed["Content-Type"] = "application/json"
    fixed[TRACE_HEADER] = trace_id

    # Header names are case-insensitive; extra headers never shadow fixed ones
    reserved = {name.lower() for name in fixed}
    headers = {
        name: value for name, value in config.extra_headers.items()
        if name.lower() not in reserved
    }
    headers.update(fixed)

    body = json.dumps(build_payload(query, config)).encode("utf-8")

    return WireRequest(
        url=config.endpoint,
        headers=MappingProxyType(headers),
        body=body,
        timeout=config.timeout_seconds,
        trace_id=trace_id
    )
