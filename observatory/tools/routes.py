# observatory/tools/routes.py
"""
Quick-check routes backed by the Observatory client.

These are NOT scan jobs. Nothing is persisted; each route makes the matching
client call and returns its JSON.

Routes (prefix /tools/observatory):
    POST /analyze              {"host", "hidden"?, "rescan"?, "wait"?, "maxWait"?}
    GET  /assessment?host=
    GET  /results?scan=
    GET  /scanner-states
    GET  /grade-distribution
    GET  /history?host=
    GET  /recent?min= | ?max=

Error mapping:
    ConfigurationError                → 400
    ScanFailedError / ScanAbortedError → 422
    ScanCancelledError                → 504
    TransportError / DecodeError      → 502
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from observatory.client import ObservatoryClient
from observatory.config import RecentScansQuery, ScanOptions
from observatory.errors import (
    ConfigurationError,
    DecodeError,
    ScanAbortedError,
    ScanCancelledError,
    ScanFailedError,
    TransportError,
)

logger = logging.getLogger(__name__)

observatory_bp = Blueprint("observatory", __name__, url_prefix="/tools/observatory")

EXTENSION_KEY = "observatory"

# Upper bound on how long a request may block waiting for a scan.
MAX_ROUTE_WAIT = 300.0
DEFAULT_ROUTE_WAIT = 60.0
ROUTE_POLL_INTERVAL = 5.0


def init_client(app, client: ObservatoryClient | None = None) -> ObservatoryClient:
    """Attach an ObservatoryClient to the app (built from env when not given)."""
    client = client or ObservatoryClient.from_env()
    app.extensions[EXTENSION_KEY] = client
    return client


def get_client() -> ObservatoryClient:
    client = current_app.extensions.get(EXTENSION_KEY)
    if client is None:
        client = init_client(current_app)
    return client


def _normalize_domain(d: str) -> str:
    d = (d or "").strip().lower()
    if d.startswith("http://") or d.startswith("https://"):
        d = d.split("://", 1)[1]
    d = d.split("/", 1)[0].split("?", 1)[0].split(":", 1)[0]
    return d.strip().strip(".")


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


def _as_int(value, name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer")


# ═══════════════════════════════════════════════════════════════
# ERROR MAPPING
# ═══════════════════════════════════════════════════════════════

@observatory_bp.errorhandler(ConfigurationError)
def _bad_request(e):
    return jsonify(error=str(e)), 400


@observatory_bp.errorhandler(ScanFailedError)
@observatory_bp.errorhandler(ScanAbortedError)
def _scan_unsuccessful(e):
    return jsonify(error=str(e)), 422


@observatory_bp.errorhandler(ScanCancelledError)
def _scan_timeout(e):
    return jsonify(error=str(e)), 504


@observatory_bp.errorhandler(TransportError)
@observatory_bp.errorhandler(DecodeError)
def _upstream_error(e):
    logger.warning("Observatory upstream error: %s", e)
    return jsonify(error=str(e)), 502


# ═══════════════════════════════════════════════════════════════
# SCANS
# ═══════════════════════════════════════════════════════════════

@observatory_bp.post("/analyze")
def analyze():
    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise ConfigurationError("JSON object body required")
    host = _normalize_domain(body.get("host", ""))

    wait = _as_bool(body.get("wait"))
    max_wait = None
    if wait:
        raw = body.get("maxWait")
        try:
            max_wait = float(raw) if raw is not None else DEFAULT_ROUTE_WAIT
        except (TypeError, ValueError):
            raise ConfigurationError("maxWait must be a number")
        max_wait = min(max_wait, MAX_ROUTE_WAIT)

    options = ScanOptions(
        hidden=_as_bool(body.get("hidden")),
        force_rescan=_as_bool(body.get("rescan")),
        wait_for_finish=wait,
        poll_interval=ROUTE_POLL_INTERVAL,
        max_wait=max_wait,
    )
    result = get_client().analyze(host, options)
    return jsonify(result.to_dict()), 200


@observatory_bp.get("/assessment")
def assessment():
    host = _normalize_domain(request.args.get("host", ""))
    return jsonify(get_client().get_assessment(host).to_dict()), 200


@observatory_bp.get("/results")
def test_results():
    scan_id = _as_int(request.args.get("scan"), "scan")
    if scan_id is None:
        raise ConfigurationError("scan is required")
    results = get_client().get_test_results(scan_id)
    return jsonify({name: r.to_dict() for name, r in results.items()}), 200


# ═══════════════════════════════════════════════════════════════
# STATISTICS
# ═══════════════════════════════════════════════════════════════

@observatory_bp.get("/scanner-states")
def scanner_states():
    return jsonify(get_client().get_scanner_states().to_dict()), 200


@observatory_bp.get("/grade-distribution")
def grade_distribution():
    return jsonify(get_client().get_grade_distribution().to_dict()), 200


@observatory_bp.get("/history")
def history():
    host = _normalize_domain(request.args.get("host", ""))
    entries = get_client().get_scan_history(host)
    return jsonify([e.to_dict() for e in entries]), 200


@observatory_bp.get("/recent")
def recent():
    query = RecentScansQuery(
        min_score=_as_int(request.args.get("min"), "min"),
        max_score=_as_int(request.args.get("max"), "max"),
    )
    return jsonify(get_client().get_recent_scans(query)), 200
