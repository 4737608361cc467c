import pytest

from python_medref import auth, db

ADMIN_PASSWORD = "s3cret-pass"

SAMPLE_COLUMNS = ["Category", "Generic Name", "Dose", "Route"]


@pytest.fixture(autouse=True)
def medref_env(tmp_path, monkeypatch):
    """Point every test at its own SQLite file and a known admin secret."""
    db_path = tmp_path / "medref.db"
    monkeypatch.setenv("MEDREF_DB_PATH", str(db_path))
    monkeypatch.setenv("ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setenv("MEDREF_SECRET", "test-signing-secret")
    monkeypatch.delenv("JWT_SECRET", raising=False)
    return db_path


@pytest.fixture
def conn():
    c = db.get_db()
    db.init_db(c)
    yield c
    c.close()


@pytest.fixture
def token():
    return auth.authenticate(ADMIN_PASSWORD)


@pytest.fixture
def sample_rows():
    return [
        {"id": "1", "data": {"Category": "Antibiotic", "Generic Name": "Amoxicillin", "Dose": "500mg", "Route": "Oral"}},
        {"id": "2", "data": {"Category": "Analgesic", "Generic Name": "Paracetamol", "Dose": "1g", "Route": "IV"}},
        {"id": "3", "data": {"Category": "Antibiotic", "Generic Name": "Ceftriaxone", "Dose": "1g", "Route": "IV"}},
        {"id": "4", "data": {"Category": "Analgesic", "Generic Name": "Ibuprofen", "Dose": "400mg", "Route": "Oral"}},
    ]


@pytest.fixture
def flask_client():
    from python_medref.app import app

    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client
