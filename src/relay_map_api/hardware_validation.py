"""
Validation of hardware relay registration payloads.

Every required field must be present and non-empty. Errors are reported per
field, with the path of the offending value inside the request body.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Tuple, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError

_EMPTY_ERROR_TYPES = {"missing", "string_too_short", "too_short"}


def _scalar_to_str(value: Any) -> Any:
    # numbers and booleans count as non-empty values
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


NonEmptyStr = Annotated[str, BeforeValidator(_scalar_to_str), Field(min_length=1)]


class SerialNumber(BaseModel):
    type: NonEmptyStr
    number: NonEmptyStr


class PublicKey(BaseModel):
    type: NonEmptyStr
    number: NonEmptyStr


class Certificate(BaseModel):
    type: NonEmptyStr
    certificate: NonEmptyStr


class HardwareRelay(BaseModel):
    """Hardware relay registration as sent by the client"""

    model_config = ConfigDict(populate_by_name=True)

    id: NonEmptyStr
    company: NonEmptyStr
    format: NonEmptyStr
    wallet: NonEmptyStr
    fingerprint: NonEmptyStr
    ser_nums: List[SerialNumber] = Field(alias="serNums", min_length=1)
    pub_keys: List[PublicKey] = Field(alias="pubKeys", min_length=1)
    certs: List[Certificate] = Field(min_length=1)


def _path(loc: Tuple[Union[int, str], ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else part
    return path


def _rule(loc: Tuple[Union[int, str], ...]) -> str:
    return ".".join("*" if isinstance(part, int) else part for part in loc)


def validation_errors(error: ValidationError) -> List[Dict[str, Any]]:
    """Convert a pydantic ValidationError into field-level messages."""
    errors = []
    for item in error.errors():
        loc = tuple(item["loc"])
        rule = _rule(loc) or "body"
        if item["type"] in _EMPTY_ERROR_TYPES or item.get("input") in (None, ""):
            msg = f"{rule} should not be empty"
        else:
            msg = f"{rule} has an invalid value"
        errors.append({
            "type": "field",
            "location": "body",
            "path": _path(loc),
            "msg": msg,
        })
    return errors


def validate_hardware_relay(payload: Any) -> Tuple[Dict[str, Any] | None, List[Dict[str, Any]]]:
    """Validate a registration payload.

    Returns:
        ``(payload, [])`` with the payload as received on success, or
        ``(None, errors)`` when any field is missing, empty or of the wrong type.
    """
    if payload is None:
        payload = {}
    try:
        HardwareRelay.model_validate(payload)
    except ValidationError as error:
        return None, validation_errors(error)
    return payload, []
