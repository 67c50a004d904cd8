# backend/gateways/payload.py
# Request body helpers shared by the HTTP routers (JSON or form bodies)

import json
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from fastapi import Request

from .errors import InvalidPayload, MissingCredential


async def read_payload(request: Request) -> Dict[str, Any]:
    """JSON, form-urlencoded/multipart, or sniffed from the raw body"""
    content_type = request.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            data = await request.json()
        elif "form-urlencoded" in content_type or "multipart/form-data" in content_type:
            form = await request.form()
            data = dict(form.items())
        else:
            data = _parse_text((await request.body()).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidPayload(f"Invalid request body: {e}")

    if not isinstance(data, dict):
        raise InvalidPayload("Request body must be an object")
    return data


def _parse_text(body: str) -> Any:
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError:
        return dict(parse_qsl(body, keep_blank_values=True))


def require_fields(data: Dict[str, Any], *names: str, gateway: Optional[str] = None) -> Dict[str, str]:
    missing = [n for n in names if not str(data.get(n) or "").strip()]
    if missing:
        raise MissingCredential(
            f"Missing required field(s): {', '.join(missing)}",
            gateway=gateway
        )
    return {n: str(data[n]).strip() for n in names}


def int_field(
    data: Dict[str, Any],
    name: str,
    required: bool = True,
    gateway: Optional[str] = None
) -> Optional[int]:
    """Whole number from JSON number or form string"""
    value = data.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise MissingCredential(f"Missing required field(s): {name}", gateway=gateway)
        return None

    if isinstance(value, bool):
        raise InvalidPayload(f"{name} must be an integer", gateway=gateway)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        return int(value.strip())
    raise InvalidPayload(f"{name} must be an integer", gateway=gateway)
