"""HTTP entrypoint that runs nearby-company lookups (Cloud Run friendly)."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from flask import Flask, jsonify, request

from company_proximity.core.config import ConfigError, get_settings
from company_proximity.core.pipeline import InvalidRequestError, ReferenceLocationError, main as run_lookup
from company_proximity.vendors.hubspot import HubSpotError

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    """Simple root to avoid 404 on GET /"""
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; reads settings without calling any provider."""
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "hubspot_configured": bool(settings.hubspot_access_token),
                "mapbox_configured": bool(settings.mapbox_access_token),
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.post("/companies/nearby")
def nearby_companies() -> Any:
    """
    Look up one batch of companies around a reference company.
    Body: {"propertiesToSend": {...}, "event": {"payload": {"batchSize": 10}}}
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}

    try:
        result = run_lookup(payload, settings=get_settings())
    except (InvalidRequestError, ReferenceLocationError) as exc:
        return jsonify({"error": str(exc)}), 400
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return jsonify({"error": "service is not configured"}), 500
    except HubSpotError as exc:
        logger.error("HubSpot lookup failed: %s", exc)
        return jsonify({"error": "CRM request failed"}), 502
    except Exception as exc:  # noqa: BLE001
        logger.exception("Nearby lookup failed: %s", exc)
        return jsonify({"error": "lookup failed"}), 500

    return jsonify({"data": result}), 200


def main() -> None:
    port = get_settings().port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
