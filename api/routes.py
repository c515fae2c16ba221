"""
API routes for the Business Card Scan API.

Flask REST API endpoints for parsing business card OCR output.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import List

from flask import Blueprint, current_app, request, jsonify
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from cardscan.parser import RecognizedLine
from cardscan.pipeline import CardScanPipeline
from config import get_parser_settings, is_allowed_file

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")

# Key of the shared pipeline in app.extensions
PIPELINE_EXTENSION = "cardscan"


def get_pipeline() -> CardScanPipeline:
    """Return the pipeline the application was created with."""
    return current_app.extensions[PIPELINE_EXTENSION]


def allowed_file(filename: str) -> bool:
    return is_allowed_file(filename, current_app.config["ALLOWED_EXTENSIONS"])


def _save_upload(file: FileStorage) -> Path:
    """Save an upload under a unique name.

    Same-named files in one batch or in concurrent requests must never
    overwrite each other before OCR reads them.
    """
    upload_dir = Path(current_app.config["UPLOAD_FOLDER"])
    upload_dir.mkdir(parents=True, exist_ok=True)
    path = upload_dir / f"{uuid.uuid4().hex}_{secure_filename(file.filename)}"
    file.save(str(path))
    return path


def _remove_uploads(paths: List[Path]) -> None:
    for path in paths:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning(f"Failed to clean up file {path}: {e}")


@api_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint.

    Returns:
        JSON with health status
    """
    return jsonify({
        "success": True,
        "status": "healthy",
        "message": "Business Card Scan API is running",
        "version": "1.0.0"
    }), 200


@api_bp.route("/status", methods=["GET"])
def get_status():
    """Get API and pipeline status.

    Returns:
        JSON with status information
    """
    try:
        pipeline = get_pipeline()
        status = pipeline.get_status()

        return jsonify({
            "success": True,
            "data": {
                "api_status": "running",
                "pipeline_status": status,
                "parser_settings": get_parser_settings(current_app.config)
            }
        }), 200

    except Exception as e:
        logger.error(f"Error getting status: {str(e)}")
        return jsonify({
            "success": False,
            "error": str(e)
        }), 500


@api_bp.route("/parse-lines", methods=["POST"])
def parse_lines():
    """Parse OCR lines supplied by the client.

    Expects:
        - JSON body with 'lines': list of {"text", "confidence", "bbox"}
        - Optional 'image_reference' string

    Returns:
        JSON with parsed contact data
    """
    data = request.get_json(silent=True)

    if not data or not isinstance(data.get("lines"), list):
        return jsonify({
            "success": False,
            "error": "No lines provided. Send JSON with a 'lines' list."
        }), 400

    try:
        lines = [RecognizedLine.from_dict(item) for item in data["lines"]]
    except (AttributeError, ValueError) as e:
        return jsonify({
            "success": False,
            "error": f"Invalid line: {e}"
        }), 400

    try:
        pipeline = get_pipeline()
        result = pipeline.process_lines(lines, image_reference=data.get("image_reference"))

        return jsonify({
            "success": result["success"],
            "data": result
        }), 200

    except Exception as e:
        logger.error(f"Error parsing lines: {str(e)}")
        return jsonify({
            "success": False,
            "error": str(e)
        }), 500


@api_bp.route("/parse-text", methods=["POST"])
def parse_text():
    """Parse raw text (skip OCR).

    Expects:
        - JSON body with 'text' field (one OCR line per text line)

    Returns:
        JSON with parsed contact data
    """
    data = request.get_json(silent=True)

    if not data or not isinstance(data.get("text"), str):
        return jsonify({
            "success": False,
            "error": "No text provided. Send JSON with 'text' field."
        }), 400

    try:
        pipeline = get_pipeline()
        result = pipeline.process_text(data["text"])

        return jsonify({
            "success": result["success"],
            "data": result
        }), 200

    except Exception as e:
        logger.error(f"Error parsing text: {str(e)}")
        return jsonify({
            "success": False,
            "error": str(e)
        }), 500


@api_bp.route("/process", methods=["POST"])
def process_single():
    """Process a single business card image.

    Expects:
        - multipart/form-data with 'file' field

    Returns:
        JSON with extracted contact data
    """
    # Check if file is present
    if "file" not in request.files:
        return jsonify({
            "success": False,
            "error": "No file provided. Use 'file' field in form-data."
        }), 400

    file = request.files["file"]

    if file.filename == "":
        return jsonify({
            "success": False,
            "error": "No file selected"
        }), 400

    if not allowed_file(file.filename):
        allowed = ", ".join(sorted(current_app.config["ALLOWED_EXTENSIONS"]))
        return jsonify({
            "success": False,
            "error": f"File type not allowed. Allowed: {allowed}"
        }), 400

    saved_paths: List[Path] = []
    try:
        upload_path = _save_upload(file)
        saved_paths.append(upload_path)
        logger.info(f"Processing uploaded file: {file.filename} -> {upload_path.name}")

        result = get_pipeline().process_image(upload_path)
        return jsonify(result), 200 if result.get("success") else 500

    except Exception as e:
        logger.exception(f"Error processing file {file.filename}")
        return jsonify({
            "success": False,
            "error": str(e)
        }), 500

    finally:
        _remove_uploads(saved_paths)


@api_bp.route("/batch", methods=["POST"])
def process_batch():
    """Process several business card images in one request.

    Expects:
        - multipart/form-data with 'files' field (multiple files)

    Returns:
        JSON with one result per accepted image, in upload order
    """
    if "files" not in request.files:
        return jsonify({
            "success": False,
            "error": "No files provided"
        }), 400

    files = [f for f in request.files.getlist("files")
             if f.filename and allowed_file(f.filename)]
    if not files:
        return jsonify({
            "success": False,
            "error": "No valid files to process"
        }), 400

    saved_paths: List[Path] = []
    try:
        for file in files:
            saved_paths.append(_save_upload(file))

        result = get_pipeline().process_batch(saved_paths)
        return jsonify(result), 200

    except Exception as e:
        logger.exception("Unhandled error in /batch")
        return jsonify({
            "success": False,
            "error": str(e)
        }), 500

    finally:
        _remove_uploads(saved_paths)
