import pytest

import app as app_module
from helpers import make_png, stub_classifier


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def flask_app(tmp_path, monkeypatch):
    app_module.app.config.update(TESTING=True, UPLOAD_DIR=tmp_path / "uploads")
    monkeypatch.setattr(
        app_module,
        "upload_policy",
        app_module.UploadPolicy(allowed_content_types={"image/png"}, classifier=stub_classifier),
    )
    yield app_module.app
    app_module.app.config.pop("UPLOAD_DIR", None)


@pytest.fixture
def client(flask_app):
    return flask_app.test_client()
