"""
Tests for Flask API routes.

Tests the REST API endpoints.
"""

import pytest
import json
import io
from pathlib import Path
from unittest.mock import Mock, patch

from api.routes import PIPELINE_EXTENSION
from app import create_app
from cardscan.pipeline import CardScanPipeline
from config import Config


class TestAPIRoutes:
    """Test cases for API routes."""

    @pytest.fixture
    def app(self, tmp_path, monkeypatch):
        """Create test Flask app."""
        monkeypatch.setattr(Config, "UPLOAD_FOLDER", str(tmp_path / "uploads"))
        app = create_app("testing")
        app.config["TESTING"] = True
        return app

    @pytest.fixture
    def client(self, app):
        """Create test client."""
        return app.test_client()

    def test_root_endpoint(self, client):
        """Test root endpoint returns API info."""
        response = client.get("/")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert "name" in data
        assert "version" in data
        assert "endpoints" in data

    def test_info_endpoint(self, client):
        """Test info endpoint lists the parse routes."""
        response = client.get("/api/info")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert "parse_lines" in data["endpoints"]

    def test_health_check(self, client):
        """Test health check endpoint."""
        response = client.get("/api/health")

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["status"] == "healthy"

    def test_status_endpoint(self, client):
        """Test status endpoint."""
        with patch('api.routes.get_pipeline') as mock_get_pipeline:
            mock_pipeline = Mock()
            mock_pipeline.get_status.return_value = {
                "ocr_engine": "easyocr",
                "locale": "ko"
            }
            mock_get_pipeline.return_value = mock_pipeline

            response = client.get("/api/status")

            assert response.status_code == 200
            data = json.loads(response.data)
            assert data["success"] is True
            assert data["data"]["parser_settings"]["locale"] == "ko"

    def test_unknown_route(self, client):
        """Test unknown paths return JSON 404."""
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        data = json.loads(response.data)
        assert data["success"] is False

    def test_parse_lines_success(self, client):
        """Test parsing lines end to end."""
        payload = {
            "lines": [
                {"text": "대표이사 김철수", "confidence": 0.95},
                {"text": "삼성전자", "confidence": 0.9},
                {"text": "010-1234-5678", "confidence": 0.9},
                {"text": "kim@samsung.com"}
            ],
            "image_reference": "card-42"
        }

        response = client.post(
            "/api/parse-lines",
            data=json.dumps(payload),
            content_type="application/json"
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        contact = data["data"]["contact_data"]
        assert contact["name"] == "김철수"
        assert contact["company"] == "삼성전자"
        assert contact["email"] == "kim@samsung.com"
        assert contact["image_reference"] == "card-42"

    def test_parse_lines_empty_list(self, client):
        """Test an empty line list yields an empty contact."""
        response = client.post(
            "/api/parse-lines",
            data=json.dumps({"lines": []}),
            content_type="application/json"
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["data"]["contact_data"]["is_valid"] is False

    def test_parse_lines_no_data(self, client):
        """Test parse-lines endpoint without data."""
        response = client.post("/api/parse-lines")

        assert response.status_code == 400

    def test_parse_lines_invalid_line(self, client):
        """Test malformed lines are rejected."""
        for lines in ([{"text": "a", "confidence": 2}], ["plain string"]):
            response = client.post(
                "/api/parse-lines",
                data=json.dumps({"lines": lines}),
                content_type="application/json"
            )

            assert response.status_code == 400, f"Failed for: {lines}"
            assert json.loads(response.data)["success"] is False

    def test_parse_text_no_data(self, client):
        """Test parse-text endpoint without data."""
        response = client.post("/api/parse-text")

        assert response.status_code == 400

    def test_parse_text_no_text_field(self, client):
        """Test parse-text endpoint without text field."""
        response = client.post(
            "/api/parse-text",
            data=json.dumps({"other": "data"}),
            content_type="application/json"
        )

        assert response.status_code == 400

    def test_parse_text_success(self, client):
        """Test successful text parsing."""
        response = client.post(
            "/api/parse-text",
            data=json.dumps({"text": "김철수\n010-1234-5678"}),
            content_type="application/json"
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        assert data["data"]["contact_data"]["phone_number"] == "010-1234-5678"

    def test_process_no_file(self, client):
        """Test process endpoint without file."""
        response = client.post("/api/process")

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data["success"] is False

    def test_process_empty_filename(self, client):
        """Test process endpoint with empty filename."""
        response = client.post(
            "/api/process",
            data={"file": (io.BytesIO(b""), "")},
            content_type="multipart/form-data"
        )

        assert response.status_code == 400

    def test_process_invalid_extension(self, client):
        """Test process endpoint with invalid file type."""
        response = client.post(
            "/api/process",
            data={"file": (io.BytesIO(b"test"), "test.txt")},
            content_type="multipart/form-data"
        )

        assert response.status_code == 400
        data = json.loads(response.data)
        assert "not allowed" in data["error"]

    @patch('api.routes.get_pipeline')
    def test_process_success(self, mock_get_pipeline, client):
        """Test successful file processing."""
        mock_pipeline = Mock()
        mock_pipeline.process_image.return_value = {
            "success": True,
            "contact_data": {"name": "김철수"}
        }
        mock_get_pipeline.return_value = mock_pipeline

        response = client.post(
            "/api/process",
            data={"file": (io.BytesIO(b"fake image data"), "test_card.jpg")},
            content_type="multipart/form-data"
        )

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["success"] is True
        uploaded = mock_pipeline.process_image.call_args[0][0]
        assert uploaded.name.endswith("_test_card.jpg")
        assert not uploaded.exists()

    @patch('api.routes.get_pipeline')
    def test_process_ocr_failure(self, mock_get_pipeline, client):
        """Test OCR failure maps to a 500 response."""
        mock_pipeline = Mock()
        mock_pipeline.process_image.return_value = {
            "success": False,
            "error": "engine crashed"
        }
        mock_get_pipeline.return_value = mock_pipeline

        response = client.post(
            "/api/process",
            data={"file": (io.BytesIO(b"fake image data"), "card.png")},
            content_type="multipart/form-data"
        )

        assert response.status_code == 500
        assert json.loads(response.data)["error"] == "engine crashed"

    def test_batch_no_files(self, client):
        """Test batch endpoint without files."""
        response = client.post("/api/batch")

        assert response.status_code == 400

    def test_batch_only_invalid_files(self, client):
        """Test batch endpoint when no file has an allowed type."""
        response = client.post(
            "/api/batch",
            data={"files": [(io.BytesIO(b"x"), "notes.txt")]},
            content_type="multipart/form-data"
        )

        assert response.status_code == 400

    @patch('api.routes.get_pipeline')
    def test_batch_success(self, mock_get_pipeline, client):
        """Test successful batch processing."""
        mock_pipeline = Mock()
        mock_pipeline.process_batch.return_value = {
            "success": True,
            "total": 2,
            "successful": 2,
            "failed": 0,
            "results": []
        }
        mock_get_pipeline.return_value = mock_pipeline

        files = [
            (io.BytesIO(b"data1"), "card1.jpg"),
            (io.BytesIO(b"data2"), "card2.jpg")
        ]

        response = client.post(
            "/api/batch",
            data={"files": files},
            content_type="multipart/form-data"
        )

        assert response.status_code == 200
        assert len(mock_pipeline.process_batch.call_args[0][0]) == 2

    @patch('api.routes.get_pipeline')
    def test_batch_same_filenames_kept_apart(self, mock_get_pipeline, client, app):
        """Test two uploads with one filename are processed as two images."""
        seen = {}

        def fake_batch(paths):
            seen["paths"] = list(paths)
            seen["contents"] = [p.read_bytes() for p in paths]
            return {"success": True, "total": len(paths), "successful": len(paths),
                    "failed": 0, "results": []}

        mock_pipeline = Mock()
        mock_pipeline.process_batch.side_effect = fake_batch
        mock_get_pipeline.return_value = mock_pipeline

        files = [
            (io.BytesIO(b"010-1111-2222"), "card.jpg"),
            (io.BytesIO(b"010-3333-4444"), "card.jpg")
        ]

        response = client.post(
            "/api/batch",
            data={"files": files},
            content_type="multipart/form-data"
        )

        assert response.status_code == 200
        assert seen["contents"] == [b"010-1111-2222", b"010-3333-4444"]
        assert len(set(seen["paths"])) == 2
        assert not any(p.exists() for p in seen["paths"])

    @patch('api.routes.get_pipeline')
    def test_process_error_removes_upload(self, mock_get_pipeline, client, app):
        """Test the upload is deleted even when processing raises."""
        mock_pipeline = Mock()
        mock_pipeline.process_image.side_effect = RuntimeError("engine crashed")
        mock_get_pipeline.return_value = mock_pipeline

        response = client.post(
            "/api/process",
            data={"file": (io.BytesIO(b"fake image data"), "card.jpg")},
            content_type="multipart/form-data"
        )

        assert response.status_code == 500
        assert json.loads(response.data)["error"] == "engine crashed"
        assert list(Path(app.config["UPLOAD_FOLDER"]).iterdir()) == []

    def test_method_not_allowed(self, client):
        """Test wrong HTTP methods return JSON 405."""
        response = client.get("/api/parse-lines")

        assert response.status_code == 405
        assert json.loads(response.data)["success"] is False

    def test_upload_too_large(self, client, app):
        """Test oversized uploads return JSON 413."""
        app.config["MAX_CONTENT_LENGTH"] = 1024

        response = client.post(
            "/api/process",
            data={"file": (io.BytesIO(b"x" * 4096), "card.jpg")},
            content_type="multipart/form-data"
        )

        assert response.status_code == 413
        data = json.loads(response.data)
        assert data["success"] is False
        assert "too large" in data["error"]


class TestCreateApp:
    """Test cases for the application factory."""

    def test_pipeline_built_from_config(self, tmp_path, monkeypatch):
        """Test the pipeline follows the configured locale and OCR settings."""
        monkeypatch.setattr(Config, "UPLOAD_FOLDER", str(tmp_path / "uploads"))
        monkeypatch.setattr(Config, "OCR_LANGUAGES", ["ko"])

        app = create_app("testing")
        pipeline = app.extensions[PIPELINE_EXTENSION]

        assert isinstance(pipeline, CardScanPipeline)
        assert pipeline.locale == "ko"
        assert pipeline.ocr.languages == ["ko"]
        assert (tmp_path / "uploads").is_dir()

    def test_injected_pipeline_used(self, tmp_path, monkeypatch):
        """Test routes use the pipeline handed to the factory."""
        monkeypatch.setattr(Config, "UPLOAD_FOLDER", str(tmp_path / "uploads"))
        pipeline = Mock()
        pipeline.process_text.return_value = {"success": True, "contact_data": {}}

        client = create_app("testing", pipeline=pipeline).test_client()
        response = client.post(
            "/api/parse-text",
            data=json.dumps({"text": "김철수"}),
            content_type="application/json"
        )

        assert response.status_code == 200
        pipeline.process_text.assert_called_once_with("김철수")

    def test_unknown_locale_rejected(self, tmp_path, monkeypatch):
        """Test an unconfigured locale fails at startup."""
        monkeypatch.setattr(Config, "UPLOAD_FOLDER", str(tmp_path / "uploads"))
        monkeypatch.setattr(Config, "LOCALE", "xx")

        with pytest.raises(KeyError):
            create_app("testing")
