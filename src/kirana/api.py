#!/usr/bin/env python3
"""
Kirana Voice Command REST API

A Flask-based REST API in front of the voice command pipeline:
- Transcript normalization
- Intent classification (local, or an upstream cloud NLU result)
- Multi-item parsing
- Routing to a UI action with a Malayalam voice reply

Usage:
    python -m kirana.api

    or

    gunicorn -w 4 -b 0.0.0.0:9002 kirana.api:app

Endpoints:
    POST /parse - Classify and route one utterance
    POST /items - Parse the items in one utterance
    GET /health - Health check
    GET /info - API information
"""
import time
from typing import Optional, Tuple

from flask import Flask, g, jsonify, request

from kirana.config import config
from kirana.logging_config import generate_request_id, setup_logging
from kirana.pipeline import VoiceCommandPipeline

# Apply config settings
PORT = config.API_PORT

# Flask app
app = Flask(__name__)
app.json.ensure_ascii = False

# Setup logging (covers every kirana.* module logger)
logger = setup_logging(
    app_name='kirana',
    log_level=config.LOG_LEVEL,
    log_format=config.LOG_FORMAT,
    log_file=config.LOG_FILE
)

# Global pipeline (built on first use; the catalog is read-only afterwards)
pipeline: Optional[VoiceCommandPipeline] = None


def get_pipeline() -> VoiceCommandPipeline:
    global pipeline  # noqa: PLW0603
    if pipeline is None:
        pipeline = VoiceCommandPipeline()
        logger.info("Pipeline initialized", extra={"products": len(pipeline.catalog)})
    return pipeline


# Request tracking middleware
@app.before_request
def before_request():
    """Track request start time and generate request ID."""
    g.start_time = time.perf_counter()
    g.request_id = request.headers.get('X-Request-ID', generate_request_id())


@app.after_request
def after_request(response):
    """Log request completion with timing and status."""
    if hasattr(g, 'start_time') and config.ENABLE_REQUEST_LOGGING:
        duration_ms = round((time.perf_counter() - g.start_time) * 1000, 2)
        logger.info(
            f'{request.method} {request.path} {response.status_code}',
            extra={
                'request_id': g.request_id,
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': duration_ms,
            }
        )

    # Add request ID to response headers
    if hasattr(g, 'request_id'):
        response.headers['X-Request-ID'] = g.request_id

    return response


def _error(message: str, status: int = 400):
    return jsonify({"success": False, "error": message}), status


def _read_text() -> Tuple[Optional[dict], Optional[str]]:
    """Request JSON and its text field, or an error message."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, "Request body must be a JSON object"
    text = data.get("text")
    if text is None:
        return None, "Missing required field: text"
    if not isinstance(text, str):
        return None, "Field 'text' must be a string"
    return data, None


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    try:
        current = get_pipeline()
    except (OSError, ValueError) as e:
        logger.error(f"Pipeline unavailable: {e}", exc_info=True)
        return jsonify({
            "status": "unhealthy",
            "message": "Pipeline components not initialized"
        }), 503

    return jsonify({
        "status": "healthy",
        "components": {
            "catalog_products": len(current.catalog),
            "scoring_rules": len(current.classifier.rules.scoring_rules),
            "legacy_rules": len(current.classifier.rules.legacy_rules),
        }
    })


@app.route("/info", methods=["GET"])
def info():
    """API information endpoint."""
    return jsonify({
        "name": "Kirana Voice Command API",
        "version": "1.0.0",
        "description": "Malayalam/English voice command parsing for kirana billing and inventory",
        "endpoints": {
            "/parse": {
                "method": "POST",
                "description": "Classify and route one utterance",
                "parameters": {
                    "text": "string (required) - Transcript or typed text",
                    "cloud_result": "object (optional) - Upstream NLU result to use instead of local classification",
                }
            },
            "/items": {
                "method": "POST",
                "description": "Parse the items named in one utterance",
                "parameters": {
                    "text": "string (required) - Transcript or typed text",
                }
            },
            "/health": {
                "method": "GET",
                "description": "Health check"
            },
            "/info": {
                "method": "GET",
                "description": "API information"
            }
        },
        "configuration": {
            "port": PORT,
            "fuzzy_threshold": config.FUZZY_THRESHOLD,
            "intent_accept_threshold": config.INTENT_ACCEPT_THRESHOLD,
            "product_boost": config.ENABLE_PRODUCT_BOOST,
        }
    })


@app.route("/parse", methods=["POST"])
def parse():
    """
    Classify and route one utterance.

    Request body:
    {
        "text": "10 kg അരി, 2 kg പഞ്ചസാര",   // required
        "cloud_result": {...}                // optional
    }

    Response:
    {
        "success": true,
        "request_id": "a1b2c3d4",
        "result": {"intent": {...}, "items": [...], "action": {...}, ...}
    }
    """
    data, error = _read_text()
    if error:
        return _error(error)

    cloud_result = data.get("cloud_result")
    if cloud_result is not None and not isinstance(cloud_result, dict):
        return _error("Field 'cloud_result' must be an object")

    result = get_pipeline().process(data["text"], cloud_result=cloud_result,
                                    request_id=g.request_id)
    logger.info(
        f"Parsed as {result.intent.intent}",
        extra={
            'request_id': g.request_id,
            'intent': result.intent.intent,
            'confidence': round(result.intent.confidence, 3),
            'source': result.intent.source.value,
            'items_count': len(result.items),
            'operation': result.action.operation if result.action else None,
        }
    )
    return jsonify({"success": True, "request_id": g.request_id, "result": result.to_dict()})


@app.route("/items", methods=["POST"])
def items():
    """
    Parse the items named in one utterance.

    Request body:
    {
        "text": "10 kg അരി 10 kg ഗോതമ്പ്"   // required
    }
    """
    data, error = _read_text()
    if error:
        return _error(error)

    parsed = get_pipeline().parse_items(data["text"])
    amounts = [item.amount for item in parsed]
    total = float(sum(amounts)) if parsed and all(a is not None for a in amounts) else None
    return jsonify({
        "success": True,
        "request_id": g.request_id,
        "items": [item.to_dict() for item in parsed],
        "total": total,
    })


@app.errorhandler(404)
def not_found(error):  # noqa: ARG001, pylint: disable=unused-argument
    """Handle 404 errors."""
    return jsonify({
        "success": False,
        "error": "Endpoint not found",
        "available_endpoints": ["/parse", "/items", "/health", "/info"]
    }), 404


@app.errorhandler(500)
def internal_error(error):  # noqa: ARG001, pylint: disable=unused-argument
    """Handle 500 errors."""
    return jsonify({
        "success": False,
        "error": "Internal server error"
    }), 500


def main():
    """Run the Flask development server."""
    logger.info("=" * 60)
    logger.info("Kirana Voice Command API")
    logger.info(f"Starting server on http://localhost:{PORT}")
    logger.info("=" * 60)
    for line in config.summary().splitlines():
        logger.debug(line)

    get_pipeline()

    logger.info(f"API ready! Listening on port {PORT}")
    logger.info(
        f"Try: curl -X POST http://localhost:{PORT}/parse -H 'Content-Type: application/json' "
        f"-d '{{\"text\": \"10 kg അരി, 2 kg പഞ്ചസാര\"}}'")

    app.run(
        host=config.API_HOST,
        port=PORT,
        debug=config.API_DEBUG
    )


if __name__ == "__main__":
    main()
