"""
Business Card Scan API - Flask Application Entry Point.

Extracts contact fields (name, phone, email, company, title, address)
from business card OCR output with a rule-based parser.
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from api.routes import PIPELINE_EXTENSION, api_bp
from cardscan.pipeline import CardScanPipeline
from config import Config, get_config

logger = logging.getLogger(__name__)


API_INFO = {
    "name": "Business Card Scan API",
    "version": "1.0.0",
    "description": "Extract contact fields from business card OCR lines",
    "endpoints": {
        "health": "/api/health",
        "status": "/api/status",
        "parse_lines": "POST /api/parse-lines",
        "parse_text": "POST /api/parse-text",
        "process_single": "POST /api/process",
        "process_batch": "POST /api/batch"
    }
}


def build_pipeline(config_class) -> CardScanPipeline:
    """Create the shared pipeline from configuration settings.

    The EasyOCR reader is not loaded here; it is built on the first image.
    """
    return CardScanPipeline(
        locale=config_class.LOCALE,
        ocr_languages=config_class.OCR_LANGUAGES,
        ocr_gpu=config_class.OCR_GPU,
        ocr_min_confidence=config_class.OCR_MIN_CONFIDENCE,
        default_confidence=config_class.DEFAULT_LINE_CONFIDENCE
    )


def create_app(config_name: Optional[str] = None,
               pipeline: Optional[CardScanPipeline] = None) -> Flask:
    """Application factory.

    Args:
        config_name: development, production or testing
        pipeline: Pre-built pipeline (built from the configuration if None)

    Returns:
        Configured Flask application

    Raises:
        KeyError: If the configured locale has no lexicon profile
    """
    config_class = get_config(config_name)

    app = Flask(__name__)
    config_class.init_app(app)

    CORS(app, resources={r"/api/*": {"origins": config_class.CORS_ORIGINS}})

    # One parser per process; profiles and weights are immutable
    if pipeline is None:
        pipeline = build_pipeline(config_class)
    app.extensions[PIPELINE_EXTENSION] = pipeline
    app.register_blueprint(api_bp)

    @app.route("/")
    @app.route("/api/info")
    def api_info():
        return jsonify(API_INFO)

    @app.errorhandler(HTTPException)
    def http_error(error):
        """Render every HTTP error (404, 405, 413, ...) as JSON."""
        if error.code == 413:
            limit_mb = app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
            message = f"File too large. Maximum size: {limit_mb}MB"
        else:
            message = error.description
        return jsonify({"success": False, "error": message}), error.code

    logger.info(f"Application created with config: {config_class.__name__}")
    return app


app = create_app()


if __name__ == "__main__":
    logger.info(f"Starting server on {Config.HOST}:{Config.PORT}")
    app.run(host=Config.HOST, port=Config.PORT, debug=app.config["DEBUG"])
