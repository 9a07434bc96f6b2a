"""
Filesystem helpers: directory creation and purging, forced downloads.
"""

import logging
import os
import shutil
from pathlib import Path

from flask import Response, send_file

logger = logging.getLogger(__name__)


def make_dir_if_not_exist(path, mode=0o755):
    """
    Create the directory and any missing parents; no-op if it exists.

    ``mode`` (less the umask) applies to every directory created, parents
    included.
    """
    path = Path(path)
    missing = []
    while not path.exists() and path.parent != path:
        missing.append(path)
        path = path.parent
    for directory in reversed(missing):
        directory.mkdir(mode=mode, exist_ok=True)


def clean_directory(path):
    """Remove everything inside ``path`` but keep the directory itself."""
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                shutil.rmtree(entry.path)
            else:
                os.remove(entry.path)
            logger.debug("Removed %s", entry.path)


def download_static_file(path, display_name):
    """
    Serve a file from disk as an attachment named ``display_name``.

    Browsers download the file instead of rendering it inline. Must be
    called while handling a request.
    """
    if not os.path.exists(path):
        return Response("File not found\n", status=404, mimetype="text/plain")

    response = send_file(
        os.path.abspath(path),
        mimetype="application/octet-stream",
        as_attachment=True,
        download_name=display_name,
    )
    response.headers["Content-Disposition"] = f'attachment; filename="{display_name}"'
    return response
