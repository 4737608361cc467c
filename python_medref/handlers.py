"""
Framework-free request handling for the four gateway endpoints.

Each ``handle_*`` takes the HTTP method, the request headers and the raw body
and returns ``(status, payload)``. The Vercel functions under ``api/`` and the
Flask app both delegate here so the behaviour cannot drift between them.
Every failure is converted into ``{"error": message}`` at this boundary.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from python_medref import auth, db
from python_medref.errors import MedRefError, ValidationError

logger = logging.getLogger(__name__)

Result = Tuple[int, Dict[str, Any]]


def _parse_body(body: Union[str, bytes, dict, None]) -> Dict[str, Any]:
    if isinstance(body, dict):
        return body
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    try:
        data = json.loads(body or "{}")
    except ValueError:
        raise ValidationError("Invalid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON")
    return data


def handle_data(method: str = "GET", headers: Optional[Mapping[str, str]] = None, body: Any = None) -> Result:
    try:
        conn = db.get_db()
        try:
            columns, rows = db.fetch_all(conn)
        finally:
            conn.close()
        return 200, {"columns": columns, "rows": rows}
    except MedRefError as e:
        return 500, e.to_dict()
    except Exception as e:
        logger.exception("Unexpected error loading data")
        return 500, {"error": str(e)}


def handle_admin_auth(method: str = "POST", headers: Optional[Mapping[str, str]] = None, body: Any = None) -> Result:
    try:
        payload = _parse_body(body)
        token = auth.authenticate(payload.get("password", ""))
        return 200, {"token": token}
    except MedRefError as e:
        return e.status_code, e.to_dict()
    except Exception as e:
        logger.exception("Unexpected error during admin login")
        return 400, {"error": str(e)}


def handle_admin_update(method: str = "POST", headers: Optional[Mapping[str, str]] = None, body: Any = None) -> Result:
    try:
        # credential first: a rejected caller never reaches storage
        auth.verify_headers(headers)
        if (method or "").upper() != "POST":
            return 405, {"error": "Method not allowed"}

        payload = _parse_body(body)
        conn = db.get_db()
        try:
            db.replace_all(conn, payload.get("columns"), payload.get("rows"))
        finally:
            conn.close()
        return 200, {"ok": True}
    except MedRefError as e:
        return e.status_code, e.to_dict()
    except Exception as e:
        logger.exception("Unexpected error saving data")
        return 500, {"error": str(e)}


def handle_health(method: str = "GET", headers: Optional[Mapping[str, str]] = None, body: Any = None) -> Result:
    return 200, {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


def json_response(status: int, payload: dict) -> dict:
    """Serverless response envelope."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json", "Access-Control-Allow-Origin": "*"},
        "body": json.dumps(payload),
    }


def serverless(handle):
    """Adapt a ``handle_*`` function to the ``handler(request)`` dict convention."""
    def handler(request: dict) -> dict:
        status, payload = handle(
            request.get("method", "GET"),
            request.get("headers") or {},
            request.get("body"),
        )
        return json_response(status, payload)
    return handler
