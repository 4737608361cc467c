import io

from python_medref.columns import DEFAULT_COLUMNS

from conftest import ADMIN_PASSWORD, SAMPLE_COLUMNS


def _login(client):
    res = client.post("/api/admin-auth", json={"password": ADMIN_PASSWORD})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.get_json()['token']}"}


def _save(client, headers, columns, rows):
    return client.post("/api/admin-update", json={"columns": columns, "rows": rows}, headers=headers)


def test_data_endpoint(flask_client):
    res = flask_client.get("/api/data")
    assert res.status_code == 200
    assert res.get_json() == {"columns": DEFAULT_COLUMNS, "rows": []}
    assert res.headers["Access-Control-Allow-Origin"] == "*"


def test_login_failure(flask_client):
    res = flask_client.post("/api/admin-auth", json={"password": "bad"})
    assert res.status_code == 401
    assert res.get_json() == {"error": "Wrong password."}


def test_save_and_reload(flask_client, sample_rows):
    headers = _login(flask_client)
    res = _save(flask_client, headers, SAMPLE_COLUMNS, sample_rows)
    assert res.status_code == 200
    assert res.get_json() == {"ok": True}

    body = flask_client.get("/api/data").get_json()
    assert body["columns"] == SAMPLE_COLUMNS
    assert [r["id"] for r in body["rows"]] == ["1", "2", "3", "4"]
    assert list(body["rows"][0]["data"]) == SAMPLE_COLUMNS


def test_save_requires_token(flask_client, sample_rows):
    res = _save(flask_client, {}, SAMPLE_COLUMNS, sample_rows)
    assert res.status_code == 401
    assert flask_client.get("/api/data").get_json()["rows"] == []


def test_save_rejects_duplicates(flask_client):
    res = _save(flask_client, _login(flask_client), ["Dose", "dose"], [])
    assert res.status_code == 400
    assert "Duplicate column name" in res.get_json()["error"]


def test_update_wrong_method(flask_client):
    res = flask_client.get("/api/admin-update", headers=_login(flask_client))
    assert res.status_code == 405


def test_export_csv(flask_client, sample_rows):
    _save(flask_client, _login(flask_client), SAMPLE_COLUMNS, sample_rows)
    res = flask_client.get("/api/export.csv")
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert "filename=medications.csv" in res.headers["Content-Disposition"]
    lines = res.get_data(as_text=True).splitlines()
    assert lines[0] == "Category,Generic Name,Dose,Route"
    assert lines[1] == "Antibiotic,Amoxicillin,500mg,Oral"


def test_import_csv_requires_admin(flask_client):
    res = flask_client.post("/api/import-csv", data="A,B\n1,2\n", content_type="text/csv")
    assert res.status_code == 401


def test_import_csv_upload_returns_draft_without_saving(flask_client):
    headers = _login(flask_client)
    res = flask_client.post(
        "/api/import-csv",
        data={"file": (io.BytesIO(b"Category,Route\nAntibiotic,Oral\n"), "meds.csv")},
        content_type="multipart/form-data",
        headers=headers,
    )
    assert res.status_code == 200
    body = res.get_json()
    assert body["columns"] == ["Category", "Route"]
    assert body["rows"][0]["data"] == {"Category": "Antibiotic", "Route": "Oral"}
    assert flask_client.get("/api/data").get_json()["columns"] == DEFAULT_COLUMNS


def test_import_csv_raw_body_parse_error(flask_client):
    res = flask_client.post(
        "/api/import-csv", data="A,B\n1,2,3\n", content_type="text/csv", headers=_login(flask_client)
    )
    assert res.status_code == 400
    assert "(row 1)" in res.get_json()["error"]


def test_import_csv_empty_body(flask_client):
    res = flask_client.post("/api/import-csv", data=b"", content_type="text/csv", headers=_login(flask_client))
    assert res.status_code == 400


def test_index_page_groups_and_filters(flask_client, sample_rows):
    _save(flask_client, _login(flask_client), SAMPLE_COLUMNS, sample_rows)
    page = flask_client.get("/").get_data(as_text=True)
    assert "Amoxicillin" in page
    assert "Paracetamol" in page

    page = flask_client.get("/?category=Antibiotic&q=amox").get_data(as_text=True)
    assert "Amoxicillin" in page
    assert "Paracetamol" not in page

    page = flask_client.get("/?q=xyz").get_data(as_text=True)
    assert "No rows match your filter/search." in page


def test_preflight(flask_client):
    res = flask_client.options("/api/admin-update")
    assert res.headers["Access-Control-Allow-Origin"] == "*"
    assert "Authorization" in res.headers["Access-Control-Allow-Headers"]
