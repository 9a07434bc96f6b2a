"""
Multipart file uploads.

Each file part is sniffed, checked against the policy's allow-list and
streamed to disk. A failure stops the batch; the raised UploadError
carries the records already stored so the caller can decide what to do
with them.
"""

import logging
import os
from dataclasses import dataclass

from flask import request
from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.formparser import FormDataParser

from .config import UploadPolicy
from .errors import (
    FileWriteError,
    MultipartParseError,
    UnsupportedFileType,
    UploadTooLarge,
)
from .files import make_dir_if_not_exist
from .randomness import random_string
from .sniff import SNIFF_LEN

logger = logging.getLogger(__name__)

# Length of the random part of generated file names
NAME_LENGTH = 25
COPY_CHUNK = 64 * 1024


@dataclass(frozen=True)
class UploadedFile:
    """One stored file."""

    stored_name: str
    original_name: str
    size: int


def file_extension(filename):
    """Extension of the last path element, dot included; '' if there is none."""
    base = filename.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def _parse_files(source, policy):
    """
    Parse the multipart body of ``source`` and return its file parts.

    Parts are grouped by field name, fields in order of first appearance;
    the files of one field keep their body order.
    """
    limit = policy.max_total_bytes
    if source.content_length is not None and source.content_length > limit:
        raise UploadTooLarge("uploaded file is too big")
    if source.mimetype != "multipart/form-data":
        raise MultipartParseError("request Content-Type isn't multipart/form-data")

    # Applies to chunked bodies too; must be set before the stream is touched
    source.max_content_length = limit
    parser = FormDataParser(max_content_length=limit, silent=False)
    try:
        _, _, files = parser.parse(
            source.stream, source.mimetype, source.content_length, source.mimetype_params
        )
    except RequestEntityTooLarge as exc:
        raise UploadTooLarge("uploaded file is too big") from exc
    except ValueError as exc:
        raise MultipartParseError(str(exc)) from exc
    return [part for _, part in files.items(multi=True)]


def _copy(src, dst):
    written = 0
    while True:
        chunk = src.read(COPY_CHUNK)
        if not chunk:
            return written
        dst.write(chunk)
        written += len(chunk)


def _store(part, upload_dir, policy, uploaded):
    original = part.filename or ""

    head = part.stream.read(SNIFF_LEN)
    content_type = policy.classifier(head)
    if not policy.allows(content_type):
        raise UnsupportedFileType(
            "uploaded file type not permitted", files=uploaded, content_type=content_type
        )

    if policy.rename_on_store:
        stored = random_string(NAME_LENGTH) + file_extension(original)
    else:
        stored = original

    try:
        part.stream.seek(0)
        with open(os.path.join(upload_dir, stored), "wb") as out:
            size = _copy(part.stream, out)
    except OSError as exc:
        raise FileWriteError(exc, files=uploaded) from exc

    logger.debug("Stored %r as %s (%s, %d bytes)", original, stored, content_type, size)
    return UploadedFile(stored_name=stored, original_name=original, size=size)


def upload_files(upload_dir, policy=None, source=None, limit=None):
    """
    Store every file of a multipart request in ``upload_dir``.

    ``source`` defaults to Flask's ``request``; ``limit`` caps how many
    file parts are processed. Returns the stored files in the order
    ``_parse_files`` yields them.
    """
    policy = policy or UploadPolicy()
    source = request if source is None else source

    make_dir_if_not_exist(upload_dir)
    parts = _parse_files(source, policy)

    uploaded = []
    try:
        for part in parts[:limit]:
            uploaded.append(_store(part, upload_dir, policy, uploaded))
    finally:
        for part in parts:
            part.close()
    return uploaded


def upload_file(upload_dir, policy=None, source=None):
    """Store only the first file of the first file field; IndexError if there is none."""
    files = upload_files(upload_dir, policy=policy, source=source, limit=1)
    if not files:
        raise IndexError("the request contains no file to upload")
    return files[0]
