"""
Example host service - wires the reqtools helpers to HTTP endpoints.
"""

import os
from pathlib import Path

from flask import Flask
from pydantic import BaseModel

from reqtools import (
    BodyTooLarge,
    FileWriteError,
    JSONDecodeFailure,
    JSONPolicy,
    JSONResponse,
    SlugError,
    UnsupportedFileType,
    UploadError,
    UploadPolicy,
    UploadTooLarge,
    download_static_file,
    error_json,
    make_dir_if_not_exist,
    read_json,
    slugify,
    upload_file,
    upload_files,
    write_json,
)
from reqtools.config import MAX_JSON_SIZE, MAX_UPLOAD_SIZE

app = Flask(__name__)

# Configuration from environment variables with sensible defaults
UPLOAD_DIR = Path(os.environ.get("REQTOOLS_UPLOAD_DIR", "./uploads"))

# Flask's own ceiling must not undercut the upload policy
app.config["MAX_CONTENT_LENGTH"] = max(MAX_UPLOAD_SIZE, MAX_JSON_SIZE)

upload_policy = UploadPolicy()
json_policy = JSONPolicy()


class SlugRequest(BaseModel):
    text: str


def error_status(err):
    if isinstance(err, FileWriteError):
        return 500
    if isinstance(err, (UploadTooLarge, BodyTooLarge)):
        return 413
    if isinstance(err, UnsupportedFileType):
        return 415
    return 400


def stored_payload(files):
    return [
        {"stored_name": f.stored_name, "original_name": f.original_name, "size": f.size}
        for f in files
    ]


@app.route("/upload", methods=["POST"])
def upload():
    """
    Store every file in the multipart body.

    On failure the files stored before the error are reported too, so
    the client knows what made it to disk.
    """
    try:
        files = upload_files(app.config.get("UPLOAD_DIR", UPLOAD_DIR), upload_policy)
    except UploadError as e:
        app.logger.warning("Upload failed after %d file(s): %s", len(e.files), e)
        return write_json(error_status(e), JSONResponse(error=True, message=str(e)))
    except OSError as e:
        return error_json(e, 500)

    return write_json(201, JSONResponse(message=f"{len(files)} file(s) uploaded", data=stored_payload(files)))


@app.route("/upload/one", methods=["POST"])
def upload_one():
    """Store the first file of the multipart body only."""
    try:
        stored = upload_file(app.config.get("UPLOAD_DIR", UPLOAD_DIR), upload_policy)
    except UploadError as e:
        return error_json(e, error_status(e))
    except IndexError as e:
        return error_json(e)
    except OSError as e:
        return error_json(e, 500)

    return write_json(201, JSONResponse(message="file uploaded", data=stored_payload([stored])[0]))


@app.route("/download/<path:name>", methods=["GET"])
def download(name):
    """Send a stored file back as an attachment under its stored name."""
    upload_dir = Path(app.config.get("UPLOAD_DIR", UPLOAD_DIR))
    return download_static_file(upload_dir / Path(name).name, Path(name).name)


@app.route("/slug", methods=["POST"])
def slug():
    """Turn ``{"text": ...}`` into a URL slug."""
    try:
        payload = read_json(SlugRequest, json_policy)
        result = slugify(payload.text)
    except JSONDecodeFailure as e:
        return error_json(e, error_status(e))
    except SlugError as e:
        return error_json(e, 422)

    return write_json(200, JSONResponse(message="slug created", data={"slug": result}))


@app.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint for monitoring."""
    return write_json(200, {"status": "healthy"})


@app.errorhandler(413)
def request_entity_too_large(error):
    """Handle payload too large errors."""
    return error_json(f"Payload too large. Maximum size is {app.config['MAX_CONTENT_LENGTH']} bytes", 413)


@app.errorhandler(500)
def internal_error(error):
    """Handle internal server errors."""
    return error_json("Internal server error", 500)


if __name__ == "__main__":
    make_dir_if_not_exist(UPLOAD_DIR)
    # Development server only - use Gunicorn in production
    app.run(host="127.0.0.1", port=5000, debug=True)
