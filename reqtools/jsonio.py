"""
Strict JSON request decoding and JSON response writing.

Request bodies are decoded in two passes: the standard library decoder
checks syntax and finds the end of the first value, then pydantic
validates that value against the caller's model in strict mode. Every
failure is raised as one of the JSONDecodeFailure subclasses, whose
messages are meant to be shown to API clients as-is.
"""

import json
import logging
import re
import types
import typing
from collections.abc import Mapping, Sequence
from collections.abc import Set as AbstractSet
from typing import Any, Optional

from flask import Response, request
from pydantic import BaseModel, ValidationError
from werkzeug.datastructures import Headers
from werkzeug.exceptions import RequestEntityTooLarge

from .config import JSONPolicy
from .errors import (
    BodyTooLarge,
    EmptyBody,
    IncompleteJSON,
    InvalidTarget,
    MalformedJSON,
    MultipleValues,
    TypeMismatch,
    Unclassified,
    UnknownField,
)

logger = logging.getLogger(__name__)

# JSON insignificant whitespace (RFC 8259), narrower than str.isspace()
_WHITESPACE = re.compile(r"[ \t\n\r]*")
_LITERALS = ("true", "false", "null", "-")


class _NonStandardConstant(ValueError):
    pass


def _reject_constant(name):
    raise _NonStandardConstant(name)


# NaN, Infinity and -Infinity are not JSON
_decoder = json.JSONDecoder(parse_constant=_reject_constant)


class JSONResponse(BaseModel):
    """The response envelope every JSON endpoint answers with."""

    error: bool = False
    message: str = ""
    data: Optional[Any] = None

    def to_wire(self):
        # data is left out entirely when unset
        exclude = {"data"} if self.data is None else None
        return self.model_dump(mode="json", exclude=exclude)


def _byte_offset(text, pos):
    return len(text[:pos].encode("utf-8"))


def _skip_whitespace(text, pos):
    return _WHITESPACE.match(text, pos).end()


def _is_type_error(err):
    kind = err["type"]
    return kind.endswith("_type") or kind.endswith("_parsing") or kind == "int_from_float"


def _field_path(loc):
    return ".".join(str(part) for part in loc if not isinstance(part, int))


def _constant_offset(text, start):
    """Byte offset of the first NaN/Infinity token outside a string."""
    in_string = escaped = False
    for pos in range(start, len(text)):
        char = text[pos]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char in "NI":
            return _byte_offset(text, pos) + 1
    return _byte_offset(text, len(text))


def _model_fields(model):
    fields = {}
    for name, info in model.model_fields.items():
        fields[info.alias or name] = info.annotation
        if model.model_config.get("populate_by_name"):
            fields[name] = info.annotation
    return fields


def _could_hold(value, annotation):
    """Whether a union member could have produced ``value`` (a dict or list)."""
    if annotation is Any:
        return True
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return isinstance(value, dict)
    origin = typing.get_origin(annotation) or annotation
    if not isinstance(origin, type) or issubclass(origin, (str, bytes)):
        return False
    if isinstance(value, dict):
        return issubclass(origin, Mapping)
    return issubclass(origin, (Sequence, AbstractSet))


def _union_unknown_key(value, members):
    # A key is unknown only if every member that could hold the value lacks it
    if not isinstance(value, (dict, list)):
        return None
    misses = []
    for member in members:
        if not _could_hold(value, member):
            continue
        found = _unknown_key(value, member)
        if found is None:
            return None
        unknown = 0
        if isinstance(value, dict) and isinstance(member, type) and issubclass(member, BaseModel):
            fields = _model_fields(member)
            unknown = sum(1 for key in value if key not in fields)
        misses.append((unknown, len(misses), found))
    if not misses:
        return None
    # Report against the member that fits best
    return min(misses)[2]


def _unknown_key(value, annotation):
    """Return the first object key in ``value`` that ``annotation`` has no field for."""
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        if not isinstance(value, dict):
            return None
        fields = _model_fields(annotation)
        for key, item in value.items():
            if key not in fields:
                return key
            found = _unknown_key(item, fields[key])
            if found is not None:
                return found
        return None

    args = typing.get_args(annotation)
    if not args:
        return None
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return _union_unknown_key(value, args)
    if isinstance(value, list):
        candidates = value
        targets = [a for a in args if a is not Ellipsis]
    elif isinstance(value, dict):
        candidates = list(value.values())
        targets = args[-1:]
    else:
        return None

    for item in candidates:
        for target in targets:
            found = _unknown_key(item, target)
            if found is not None:
                return found
    return None


def _classify(exc, offset):
    errors = exc.errors()
    for err in errors:
        if _is_type_error(err):
            return TypeMismatch(field=_field_path(err["loc"]) or None, offset=offset)
    for err in errors:
        if err["type"] == "extra_forbidden":
            return UnknownField(_field_path(err["loc"][-1:]))
    return None


def decode_json(body, model, policy=None):
    """
    Decode ``body`` (bytes) into an instance of the pydantic ``model``.

    Exactly one JSON value is accepted. With ``allow_unknown_fields``
    off, object keys the model does not declare are rejected at any
    nesting depth.
    """
    policy = policy or JSONPolicy()
    if len(body) > policy.max_body_bytes:
        raise BodyTooLarge(policy.max_body_bytes)

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedJSON(exc.start + 1) from exc

    start = _skip_whitespace(text, 0)
    if start == len(text):
        raise EmptyBody()

    try:
        value, end = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        tail = text[exc.pos:].rstrip(" \t\n\r")
        if (
            exc.pos >= len(text)
            or exc.msg.startswith("Unterminated string")
            or (tail and any(lit.startswith(tail) for lit in _LITERALS))
        ):
            raise IncompleteJSON() from exc
        raise MalformedJSON(_byte_offset(text, exc.pos) + 1) from exc
    except _NonStandardConstant as exc:
        raise MalformedJSON(_constant_offset(text, start)) from exc

    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise InvalidTarget(f"{model!r} is not a pydantic model class")

    try:
        instance = model.model_validate_json(text[start:end], strict=True)
    except ValidationError as exc:
        failure = _classify(exc, _byte_offset(text, end))
        if failure is None and not policy.allow_unknown_fields:
            key = _unknown_key(value, model)
            if key is not None:
                failure = UnknownField(key)
        raise (failure or Unclassified(str(exc))) from exc

    if not policy.allow_unknown_fields:
        key = _unknown_key(value, model)
        if key is not None:
            raise UnknownField(key)

    if _skip_whitespace(text, end) != len(text):
        raise MultipleValues()

    logger.debug("Decoded %d byte body into %s", len(body), model.__name__)
    return instance


def read_json(model, policy=None, source=None):
    """
    Read the current request body and decode it into ``model``.

    ``source`` defaults to Flask's ``request``. The body is never read
    beyond ``max_body_bytes + 1`` bytes.
    """
    policy = policy or JSONPolicy()
    source = request if source is None else source
    limit = policy.max_body_bytes

    if source.content_length is not None and source.content_length > limit:
        raise BodyTooLarge(limit)
    try:
        body = source.stream.read(limit + 1)
    except RequestEntityTooLarge as exc:
        raise BodyTooLarge(limit) from exc

    return decode_json(body, model, policy)


def to_jsonable(data):
    if isinstance(data, JSONResponse):
        return data.to_wire()
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    return data


def write_json(status, data, headers=None):
    """
    Build a JSON response.

    Serialization errors propagate before any response exists. Headers
    passed by the caller win over the default ``Content-Type``.
    """
    body = json.dumps(
        to_jsonable(data), separators=(",", ":"), ensure_ascii=False, allow_nan=False
    )

    response = Response(body.encode("utf-8"), status=status, mimetype="application/json")
    if headers:
        if not isinstance(headers, Headers):
            headers = Headers(headers)
        for key in dict.fromkeys(headers.keys()):
            response.headers.setlist(key, headers.getlist(key))
    return response


def error_json(err, status=400):
    """Wrap ``err`` in an error envelope and build the response for it."""
    payload = JSONResponse(error=True, message=str(err))
    return write_json(status, payload)
