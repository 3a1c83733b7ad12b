"""
Gumroad webhook payload extraction.

Gumroad posts form-encoded bodies, but proxies and replays have been seen
sending JSON or URL-encoded text with other content types. Decoders are
tried in a fixed order; the first that yields a non-empty mapping wins.
"""

import json
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.http import HttpRequest, QueryDict
from django.http.multipartparser import MultiPartParserError

from core.domain.exceptions import MissingFieldError, RequestValidationError

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
FIELD_LIMITS = {"purchase_id": 255, "email": 254, "license_key": 255}


@dataclass(frozen=True)
class PurchasePayload:
    """Fields of a purchase notification."""

    purchase_id: str
    email: str
    license_key: str


def _form_fields(request: HttpRequest) -> Dict[str, str]:
    if request.content_type not in FORM_CONTENT_TYPES:
        return {}
    return request.POST.dict()


def _json_body(request: HttpRequest) -> Dict[str, str]:
    data = json.loads(request.body.decode("utf-8"))
    return data if isinstance(data, dict) else {}


def _urlencoded_text(request: HttpRequest) -> Dict[str, str]:
    return QueryDict(request.body.decode("utf-8")).dict()


DECODERS: List[Callable[[HttpRequest], Dict[str, str]]] = [
    _form_fields,
    _json_body,
    _urlencoded_text,
]


def decode_body(request: HttpRequest) -> Dict[str, str]:
    """Return the first non-empty mapping any decoder produces."""
    # Buffer the body first so every decoder can read it
    request.body
    for decoder in DECODERS:
        try:
            data = decoder(request)
        except (ValueError, UnicodeDecodeError, MultiPartParserError) as e:
            logger.debug("Webhook decoder %s failed: %s", decoder.__name__, e)
            continue
        if data:
            logger.debug("Webhook body decoded by %s", decoder.__name__)
            return data
    return {}


def _text(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def extract_purchase(request: HttpRequest) -> PurchasePayload:
    """
    Extract the purchase fields from a webhook request.

    Raises:
        MissingFieldError: If purchase id, email or license key is absent
        RequestValidationError: If the email is malformed or a field is too long
    """
    data = decode_body(request)
    purchase_id = _text(data.get("sale_id")) or _text(data.get("purchase_id"))
    if not purchase_id:
        raise MissingFieldError("purchase_id", "Missing purchase ID")
    email = _text(data.get("email"))
    if not email:
        raise MissingFieldError("email", "Missing email")
    license_key = _text(data.get("license_key"))
    if not license_key:
        raise MissingFieldError("license_key", "Missing license key")
    fields = {"purchase_id": purchase_id, "email": email, "license_key": license_key}
    for name, value in fields.items():
        if len(value) > FIELD_LIMITS[name]:
            raise RequestValidationError(f"{name} is too long")
    try:
        validate_email(email)
    except ValidationError as e:
        raise RequestValidationError("Invalid email address") from e
    return PurchasePayload(purchase_id=purchase_id, email=email, license_key=license_key)
