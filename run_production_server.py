#!/usr/bin/env python3
"""
Run the MedRef backend with a production WSGI server (Waitress) instead of the Flask dev server.
Usage:
  python run_production_server.py  # defaults to 127.0.0.1:5000
Env vars:
  MEDREF_HOST, MEDREF_PORT, MEDREF_DATA_DIR, ADMIN_PASSWORD, MEDREF_SECRET
"""
from python_medref.launcher import main as launcher_main

if __name__ == "__main__":
    raise SystemExit(launcher_main())
