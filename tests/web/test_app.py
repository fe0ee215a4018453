"""HTTP-level tests for the FastAPI app with the model call mocked out."""

# pylint: disable=missing-class-docstring,missing-function-docstring

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from social_extract.extractor.errors import ConfigurationError, PayloadTooLargeError, TransientExtractionError
from social_extract.web.app import app

_PATCH_EXTRACT = "social_extract.web.app.extract_reply"

REPLY = "```tsv\nUsername\tLink\tFollowers\tViews\nalice\thttps://x/alice\t12.3K\t7.89万\n```"


@pytest.fixture(name="client")
def client_fixture():
    return TestClient(app)


def _png(name: str = "shot.png"):
    return ("files", (name, b"\x89PNG fake", "image/png"))


class TestExtractEndpoint:

    def test_success(self, client):
        with patch(_PATCH_EXTRACT, return_value=REPLY) as mock_extract:
            response = client.post("/api/extract", files=[_png()], data={"platform": "TikTok"})
        assert response.status_code == 200
        body = response.json()
        assert body["row_count"] == 1
        assert body["rows"][0]["username"] == "alice"
        assert body["rows"][0]["views_numeric"] == 78900.0
        assert body["raw_text"] == REPLY
        assert body["canonical_text"].startswith("Username")
        images, platform = mock_extract.call_args.args
        assert platform == "TikTok"
        assert images[0].mime_type == "image/png"

    def test_zero_rows_is_not_an_error(self, client):
        with patch(_PATCH_EXTRACT, return_value="I could not find any data."):
            response = client.post("/api/extract", files=[_png()])
        assert response.status_code == 200
        assert response.json()["row_count"] == 0

    def test_unsupported_file(self, client):
        response = client.post("/api/extract", files=[("files", ("report.docx", b"PK", "application/octet-stream"))])
        assert response.status_code == 415

    def test_no_files(self, client):
        response = client.post("/api/extract", data={"platform": "TikTok"})
        assert response.status_code == 400

    def test_unknown_platform(self, client):
        response = client.post("/api/extract", files=[_png()], data={"platform": "MySpace"})
        assert response.status_code == 422

    @pytest.mark.parametrize(
        "error, status, kind",
        [
            (ConfigurationError(), 500, "configuration"),
            (PayloadTooLargeError(), 413, "payload_too_large"),
            (TransientExtractionError(), 503, "transient"),
        ],
    )
    def test_extraction_errors(self, client, error, status, kind):
        with patch(_PATCH_EXTRACT, side_effect=error):
            response = client.post("/api/extract", files=[_png()])
        assert response.status_code == status
        assert response.json()["kind"] == kind
        assert response.json()["detail"] == error.message


class TestNormalizeEndpoint:

    def test_pipe_table(self, client):
        raw = "| user | link | 5K | 10K |\n|---|---|---|---|\n| a | b | 1K | 2K |"
        response = client.post("/api/normalize", json={"raw_text": raw})
        assert response.status_code == 200
        body = response.json()
        assert [row["username"] for row in body["rows"]] == ["a"]
        assert body["schema_version"] == "v2"

    def test_v1_schema(self, client):
        response = client.post("/api/normalize", json={"raw_text": "alice\tlink", "schema_version": "v1"})
        assert response.json()["row_count"] == 1

    def test_unknown_schema(self, client):
        response = client.post("/api/normalize", json={"raw_text": "", "schema_version": "v9"})
        assert response.status_code == 422

    def test_english_locale(self, client):
        response = client.post("/api/normalize", json={"raw_text": "a\tb\tc\td", "locale": "en"})
        assert response.json()["rows"][0]["content_type"] == "Post"


class TestExportEndpoint:

    def test_export_with_renamed_labels(self, client):
        rows = [{"username": "alice", "views_display": "7.89万", "views_numeric": 78900.0}]
        response = client.post("/api/export", json={"rows": rows, "header_labels": {"username": "博主"}})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/tab-separated-values")
        lines = response.text.split("\n")
        assert lines[0].startswith("#\t博主\t")
        assert lines[1].startswith("1\talice\t")

    def test_bad_label_count(self, client):
        response = client.post("/api/export", json={"rows": [], "header_labels": ["a", "b"]})
        assert response.status_code == 422


class TestListingEndpoints:

    def test_platforms(self, client):
        ids = [p["id"] for p in client.get("/api/platforms").json()]
        assert ids[0] == "Auto-detect"
        assert "Xiaohongshu" in ids

    def test_schemas(self, client):
        schemas = {s["version"]: s for s in client.get("/api/schemas").json()}
        assert schemas["v1"]["min_columns"] == 2
        assert schemas["v2"]["min_columns"] == 4
        assert schemas["v2"]["default"] is True
