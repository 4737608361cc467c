"""Error types shared by the gateway, the CSV bridge and the editing session.

Every error carries the HTTP status the request handlers answer with, so the
boundary code can turn any of them into ``{"error": message}`` without a
lookup table.
"""


class MedRefError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class AuthError(MedRefError):
    """Missing, invalid or expired credential, or a wrong admin password."""
    status_code = 401


class ValidationError(MedRefError):
    """Bad column names, duplicate names, missing fields or a bad CSV header."""
    status_code = 400


class ParseError(MedRefError):
    """Malformed CSV body."""
    status_code = 400

    def __init__(self, message: str, row=None):
        if row is not None:
            message = f"{message} (row {row})"
        super().__init__(message)
        self.row = row


class StorageError(MedRefError):
    status_code = 500
