"""
Admin authentication.

There is one shared admin password and no user accounts. A correct password
buys a signed bearer token carrying ``{"role": "admin"}`` that stays valid for
seven days; every mutating endpoint verifies it before touching storage.
"""
import hmac
import logging
from functools import wraps
from typing import Any, Mapping, Optional

from flask import jsonify, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from python_medref import config
from python_medref.errors import AuthError

logger = logging.getLogger(__name__)

TOKEN_MAX_AGE = 7 * 24 * 60 * 60
ADMIN_ROLE = "admin"
_SALT = "medref-admin"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(config.get_secret(), salt=_SALT)


def check_password(password: Any) -> bool:
    expected = config.get_admin_password().encode("utf-8")
    given = str(password if password is not None else "").encode("utf-8")
    return hmac.compare_digest(given, expected)


def sign_admin_token() -> str:
    return _serializer().dumps({"role": ADMIN_ROLE})


def authenticate(password: Any) -> str:
    if not check_password(password):
        logger.warning("Rejected admin login: wrong password")
        raise AuthError("Wrong password.")
    logger.info("Admin token issued")
    return sign_admin_token()


def verify_token(token: Optional[str], max_age: int = TOKEN_MAX_AGE) -> dict:
    if not token:
        raise AuthError("Missing Authorization header.")
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        logger.warning("Rejected expired admin token")
        raise AuthError("Invalid or expired token.")
    except BadSignature:
        logger.warning("Rejected admin token with bad signature")
        raise AuthError("Invalid or expired token.")
    if not isinstance(payload, dict) or payload.get("role") != ADMIN_ROLE:
        logger.warning("Rejected admin token with wrong role claim")
        raise AuthError("Invalid or expired token.")
    return payload


def token_from_headers(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    """Pull the bearer token out of an ``Authorization`` header, if any."""
    if not headers:
        return None
    auth = headers.get("Authorization") or headers.get("authorization") or ""
    if not auth.startswith("Bearer "):
        return None
    return auth[len("Bearer "):].strip() or None


def verify_headers(headers: Optional[Mapping[str, str]]) -> dict:
    return verify_token(token_from_headers(headers))


def require_admin(f):
    """
    Flask view decorator: reject the request with 401 unless it carries a
    valid admin bearer token. Runs before the view, so nothing is written.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            verify_headers(request.headers)
        except AuthError as e:
            logger.warning(f"Unauthorized admin access attempt from {request.remote_addr} to {request.path}")
            return jsonify(e.to_dict()), e.status_code
        return f(*args, **kwargs)
    return decorated_function
