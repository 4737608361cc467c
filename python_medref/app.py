from __future__ import annotations
import logging
from typing import Tuple

from flask import Flask, Response, jsonify, render_template, request

from python_medref import config, csv_bridge, db, handlers
from python_medref.auth import require_admin
from python_medref.errors import MedRefError
from python_medref.grouping import ALL_CATEGORIES, category_options, group_rows

logging.basicConfig(
    level=config.get_log_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.json.sort_keys = False  # keep column order in row objects


# Add CORS headers to all responses
@app.after_request
def after_request(response):
    response.headers.add('Access-Control-Allow-Origin', '*')
    response.headers.add('Access-Control-Allow-Headers', 'Content-Type,Authorization')
    response.headers.add('Access-Control-Allow-Methods', 'GET,POST,OPTIONS')
    return response


# Handle preflight requests
@app.route('/<path:path>', methods=['OPTIONS'])
@app.route('/', methods=['OPTIONS'])
def handle_options(path=None):
    return Response()


def _respond(result: Tuple[int, dict]):
    status, payload = result
    return jsonify(payload), status


def _load() -> Tuple[list, list]:
    conn = db.get_db()
    try:
        return db.fetch_all(conn)
    finally:
        conn.close()


# --- Table page ---

@app.get("/")
def index() -> str:
    category = (request.args.get("category") or ALL_CATEGORIES).strip()
    q = (request.args.get("q") or "").strip()
    try:
        columns, rows = _load()
    except MedRefError as e:
        return render_template("index.html", error=e.message, columns=[], grouped=None,
                               categories=[], category=category, q=q), 500

    grouped = group_rows(columns, rows, category, q)
    return render_template(
        "index.html",
        columns=columns,
        grouped=grouped,
        categories=category_options(columns, rows),
        category=category,
        q=q,
        show_category_headers=category == ALL_CATEGORIES,
        error=None,
    )


# --- Gateway endpoints ---

@app.get("/api/data")
def api_data():
    return _respond(handlers.handle_data(request.method, request.headers))


@app.post("/api/admin-auth")
def api_admin_auth():
    return _respond(handlers.handle_admin_auth(request.method, request.headers, request.get_data()))


@app.route("/api/admin-update", methods=["GET", "POST", "PUT", "DELETE"])
def api_admin_update():
    return _respond(handlers.handle_admin_update(request.method, request.headers, request.get_data()))


@app.get("/api/health")
def api_health():
    return _respond(handlers.handle_health(request.method))


# --- CSV ---

@app.get("/api/export.csv")
def api_export_csv():
    try:
        columns, rows = _load()
    except MedRefError as e:
        return jsonify(e.to_dict()), e.status_code

    return Response(
        csv_bridge.export_csv(columns, rows),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={csv_bridge.EXPORT_FILENAME}"},
    )


@app.post("/api/import-csv")
@require_admin
def api_import_csv():
    """Parse an uploaded CSV and return it as a draft. Nothing is saved."""
    upload = request.files.get("file")
    if upload is not None:
        raw = upload.read()
    else:
        raw = request.get_data()
    if not raw:
        return jsonify({"error": "Request must contain a CSV file"}), 400

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        return jsonify({"error": "CSV must be UTF-8 encoded"}), 400

    try:
        columns, rows = csv_bridge.import_csv(text)
    except MedRefError as e:
        logger.info(f"CSV import rejected: {e.message}")
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"columns": columns, "rows": rows})


if __name__ == "__main__":
    app.run(debug=True)
