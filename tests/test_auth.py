from models.user import User
from auth_service import grant_course


def test_register_login_scenario(client):
    r = client.post("/api/register", json={"email": "a@x.com", "name": "Alice", "password": "secret1"})
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["token"]
    assert body["user"]["email"] == "a@x.com"
    assert body["user"]["name"] == "Alice"
    assert body["user"]["courses"] == []

    r_login = client.post("/api/login", json={"email": "a@x.com", "password": "secret1"})
    assert r_login.status_code == 200
    assert r_login.json()["user"]["id"] == body["user"]["id"]

    r_bad = client.post("/api/login", json={"email": "a@x.com", "password": "wrong"})
    assert r_bad.status_code == 401
    assert r_bad.json()["message"] == "Invalid credentials"


def test_login_unknown_email_is_401(client):
    r = client.post("/api/login", json={"email": "ghost@x.com", "password": "whatever"})
    assert r.status_code == 401


def test_register_duplicate_email(client):
    payload = {"email": "a@x.com", "name": "Alice", "password": "secret1"}
    assert client.post("/api/register", json=payload).status_code == 201
    r = client.post("/api/register", json=payload)
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_register_requires_fields_and_password_length(client):
    assert client.post("/api/register", json={"email": "a@x.com", "password": "secret1"}).status_code == 400
    assert client.post("/api/register", json={"email": "a@x.com", "name": "A", "password": "123"}).status_code == 400


def test_password_is_hashed(client, db_session):
    client.post("/api/register", json={"email": "a@x.com", "name": "Alice", "password": "secret1"})
    user = db_session.query(User).filter_by(email="a@x.com").first()
    assert user.password != "secret1"
    assert user.password.startswith("$2")


def test_profile_requires_valid_token(client):
    token = client.post("/api/register", json={"email": "a@x.com", "name": "Alice", "password": "secret1"}).json()["token"]
    r = client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["email"] == "a@x.com"
    assert client.get("/api/profile").status_code == 401
    assert client.get("/api/profile", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_registration_claims_identity_created_by_payment_approval(client, db_session):
    grant_course(db_session, "payer@x.com", "practical-ibarat", name="Payer")
    db_session.commit()
    # Password-less identity cannot log in
    assert client.post("/api/login", json={"email": "payer@x.com", "password": "secret1"}).status_code == 401

    r = client.post("/api/register", json={"email": "payer@x.com", "name": "Payer", "password": "secret1"})
    assert r.status_code == 201, r.text
    assert r.json()["user"]["courses"] == ["practical-ibarat"]
    assert db_session.query(User).filter_by(email="payer@x.com").count() == 1


def test_user_courses_unknown_user(client):
    r = client.get("/api/users/ghost@x.com/courses")
    assert r.status_code == 404
