"""Outbound JSON requests."""

import json
import logging

import requests

from .jsonio import to_jsonable

logger = logging.getLogger(__name__)


def post_json(uri, data, session=None, timeout=None):
    """
    POST ``data`` as JSON to ``uri``.

    ``session`` may be any object with a ``requests.Session``-style
    ``post`` method; a fresh session is used otherwise. Returns the
    response and its status code. Serialization and transport errors
    propagate unchanged.
    """
    body = json.dumps(to_jsonable(data), allow_nan=False)

    owned = session is None
    if owned:
        session = requests.Session()
    try:
        response = session.post(
            uri,
            data=body.encode("utf-8"),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    finally:
        if owned:
            session.close()

    logger.debug("POST %s -> %s", uri, response.status_code)
    return response, response.status_code
