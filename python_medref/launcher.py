"""
Production launcher for the MedRef Flask backend.

Picks a writable data directory for the SQLite DB (also when frozen into a
single EXE), prepares the schema and serves the app without debug mode.
"""
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def get_default_data_dir() -> str:
    if getattr(sys, "frozen", False):
        # Prefer LOCALAPPDATA on Windows; fallback to user home
        base = os.getenv("LOCALAPPDATA") or str(Path.home())
        return str(Path(base) / "MedRef_Data")
    return str(Path(__file__).parent)


def main() -> int:
    data_dir = os.environ.get("MEDREF_DATA_DIR") or get_default_data_dir()
    os.makedirs(data_dir, exist_ok=True)
    os.environ["MEDREF_DATA_DIR"] = data_dir

    # Import the Flask app after MEDREF_DATA_DIR is final
    from python_medref import config, db
    from python_medref.app import app as flask_app
    from python_medref.errors import StorageError

    try:
        conn = db.get_db()
        try:
            db.init_db(conn)
        finally:
            conn.close()
    except StorageError as e:
        logger.error(f"DB initialization error: {e}")
        return 1

    port = config.get_port()
    host = config.get_host()
    print("\U0001F48A Starting MedRef Backend")
    print(f"\U0001F4C1 Data dir: {data_dir}")
    print(f"\U0001F310 URL: http://{host}:{port}")
    try:
        try:
            from waitress import serve
        except ImportError:
            logger.warning("Waitress not available; falling back to Flask built-in server")
            flask_app.run(host=host, port=port, debug=False, threaded=True)
        else:
            logger.info("Using Waitress WSGI server")
            serve(flask_app, host=host, port=port)
        return 0
    except KeyboardInterrupt:
        print("\nStopped")
        return 0
    except OSError as e:
        logger.error(f"Server error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
