from datetime import timedelta

from jose import jwt

from donorhub.domain.services.auth_service import create_access_token


def test_register_returns_user_and_token_without_password(client, test_user):
    response = client.post("/api/auth/register", json=test_user)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["email"] == test_user["email"]
    assert data["user"]["name"] == test_user["name"]
    assert data["tokenType"] == "bearer"
    assert data["token"]
    assert "password" not in data["user"]
    assert "hashedPassword" not in data["user"]


def test_register_token_embeds_id_and_email(client, test_user):
    data = client.post("/api/auth/register", json=test_user).json()["data"]
    claims = jwt.get_unverified_claims(data["token"])
    assert claims["sub"] == str(data["user"]["id"])
    assert claims["email"] == test_user["email"]
    assert "exp" in claims


def test_register_duplicate_email_conflicts(client, test_user):
    assert client.post("/api/auth/register", json=test_user).status_code == 201
    response = client.post(
        "/api/auth/register", json={**test_user, "email": test_user["email"].upper()}
    )
    assert response.status_code == 409
    assert response.json()["code"] == "user.email_taken"


def test_register_missing_fields_is_validation_error(client):
    response = client.post("/api/auth/register", json={"email": "a@donorhub.org"})
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "request.validation_error"
    assert {tuple(e["loc"]) for e in body["errors"]} >= {("password",), ("name",)}


def test_register_short_password_rejected(client, test_user):
    response = client.post("/api/auth/register", json={**test_user, "password": "short"})
    assert response.status_code == 400


def test_login_success(client, test_user):
    client.post("/api/auth/register", json=test_user)
    response = client.post(
        "/api/auth/login",
        json={"email": test_user["email"], "password": test_user["password"]},
    )
    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == test_user["email"]


def test_login_failures_share_one_generic_message(client, test_user):
    client.post("/api/auth/register", json=test_user)
    wrong_password = client.post(
        "/api/auth/login", json={"email": test_user["email"], "password": "nope-nope"}
    )
    unknown_email = client.post(
        "/api/auth/login", json={"email": "ghost@donorhub.org", "password": "whatever1"}
    )
    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["detail"] == "Invalid email or password"


def test_login_missing_fields(client, test_user):
    response = client.post("/api/auth/login", json={"email": test_user["email"]})
    assert response.status_code == 400


def test_missing_token_is_rejected(client):
    response = client.get("/api/donors")
    assert response.status_code == 401
    assert response.json()["code"] == "auth.missing_token"
    assert response.headers["www-authenticate"] == "Bearer"


def test_expired_token_is_rejected(client):
    token = create_access_token(
        {"sub": "1", "email": "a@donorhub.org"}, expires_delta=timedelta(seconds=-30)
    )
    response = client.get("/api/donors", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["code"] == "auth.token_expired"


def test_malformed_token_is_rejected(client):
    response = client.get("/api/donors", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["code"] == "auth.invalid_token"


def test_token_signed_with_other_key_is_rejected(client):
    forged = jwt.encode({"sub": "1", "email": "a@donorhub.org"}, "other-key", algorithm="HS256")
    response = client.get("/api/donors", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401
    assert response.json()["code"] == "auth.invalid_token"


def test_me_returns_profile(auth_client, test_user):
    response = auth_client.get("/api/auth/me")
    assert response.status_code == 200
    assert response.json()["data"]["email"] == test_user["email"]


def test_logout_and_health_need_no_token(client):
    assert client.post("/api/auth/logout").status_code == 200
    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.json()["data"]["status"] == "OK"


def test_login_with_malformed_email_gets_generic_failure(client, test_user):
    client.post("/api/auth/register", json=test_user)
    response = client.post(
        "/api/auth/login", json={"email": "not-an-email", "password": test_user["password"]}
    )
    assert response.status_code == 401
    assert response.json()["code"] == "auth.invalid_credentials"
    assert response.json()["detail"] == "Invalid email or password"
