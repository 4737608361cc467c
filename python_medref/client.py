"""
HTTP client for the gateway endpoints, used by scripts and the desktop shell.

Error responses are turned back into the same exception types the server
raised, so callers handle a remote save exactly like a local one.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from python_medref.draft import Draft
from python_medref.errors import AuthError, StorageError, ValidationError

logger = logging.getLogger(__name__)

_ERRORS_BY_STATUS = {400: ValidationError, 401: AuthError}


def _safe_message(res: requests.Response) -> str:
    try:
        data = res.json()
        return data.get("error") or data.get("message") or ""
    except ValueError:
        return res.text or ""


class MedRefClient:
    def __init__(self, base_url: str = "http://127.0.0.1:5000", token: Optional[str] = None, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = requests.Session()

    def _request(self, method: str, path: str, what: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            res = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{what} failed: {e}")
            raise StorageError(f"{what} failed: {e}")
        if not res.ok:
            msg = _safe_message(res) or f"{what} failed ({res.status_code})"
            raise _ERRORS_BY_STATUS.get(res.status_code, StorageError)(msg)
        return res.json()

    def fetch_all(self) -> Dict[str, Any]:
        return self._request("GET", "/api/data", "Load data")

    def login(self, password: str) -> str:
        data = self._request("POST", "/api/admin-auth", "Login", json={"password": password})
        self.token = data["token"]
        return self.token

    def logout(self) -> None:
        self.token = None

    def replace_all(self, columns: List[str], rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        if not self.token:
            raise AuthError("Missing Authorization header.")
        return self._request(
            "POST",
            "/api/admin-update",
            "Save",
            json={"columns": columns, "rows": rows},
            headers={"Authorization": f"Bearer {self.token}"},
        )

    def load_draft(self) -> Draft:
        return Draft.from_payload(self.fetch_all())

    def save(self, draft: Draft) -> Draft:
        """Send the draft and return a fresh copy of what was stored."""
        payload = draft.payload()
        self.replace_all(payload["columns"], payload["rows"])
        return self.load_draft()
