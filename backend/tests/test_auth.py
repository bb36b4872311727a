from conftest import signin, signup


def test_signup_then_signin_returns_token(client):
    response = signup(client, "alice@example.com", phone="555-0100", location="Berlin")
    assert response.status_code == 201
    assert response.json() == {"message": "User registered successfully"}

    response = signin(client, "alice@example.com")
    assert response.status_code == 200
    body = response.json()
    assert body["token"]
    assert body["tokenType"] == "bearer"


def test_signin_with_wrong_password_is_rejected(client):
    signup(client, "alice@example.com", password="right-password")

    response = signin(client, "alice@example.com", password="wrong-password")

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid email or password"}


def test_signin_with_unknown_email_is_rejected(client):
    response = signin(client, "nobody@example.com")

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid email or password"


def test_signin_requires_both_fields(client):
    response = client.post("/api/signin", json={"email": "alice@example.com"})

    assert response.status_code == 400
    assert response.json()["message"] == "All fields are required"


def test_duplicate_email_is_rejected(client):
    assert signup(client, "alice@example.com").status_code == 201

    response = signup(client, "alice@example.com", full_name="Other Alice")

    assert response.status_code == 400
    assert response.json()["message"] == "Email already registered"


def test_mixed_case_email_signs_in_with_the_same_spelling(client):
    assert signup(client, "Alice@Example.COM").status_code == 201

    assert signin(client, "Alice@Example.COM").status_code == 200
    assert signin(client, "alice@example.com").status_code == 200


def test_email_differing_only_in_case_is_a_duplicate(client):
    assert signup(client, "alice@example.com").status_code == 201

    response = signup(client, "ALICE@example.com")

    assert response.status_code == 400
    assert response.json()["message"] == "Email already registered"


def test_password_longer_than_bcrypt_limit_is_rejected(client):
    response = signup(client, "alice@example.com", password="x" * 73)

    assert response.status_code == 400
    assert response.json()["message"] == "Password must be at most 72 bytes"


def test_signin_does_not_match_on_truncated_password(client):
    password = "p" * 72
    assert signup(client, "alice@example.com", password=password).status_code == 201

    assert signin(client, "alice@example.com", password=password).status_code == 200
    response = signin(client, "alice@example.com", password=password + "extra")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid email or password"


def test_signup_with_missing_fields_is_rejected(client):
    response = client.post("/api/signup", json={"email": "alice@example.com"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request"


def test_profile_shows_user_and_join_activity(client, make_user):
    _, headers = make_user("alice@example.com", full_name="Alice Smith")

    response = client.get("/api/profile", headers=headers)

    assert response.status_code == 200
    profile = response.json()
    assert profile["fullName"] == "Alice Smith"
    assert profile["email"] == "alice@example.com"
    assert profile["postedAuctions"] == []
    assert profile["participatedAuctions"] == []
    assert profile["wonAuctions"] == []
    assert [a["description"] for a in profile["recentActivity"]] == ["Joined the platform"]
    assert "password" not in profile
    assert "hashedPassword" not in profile


def test_missing_token_is_unauthenticated(client):
    response = client.get("/api/profile")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_invalid_token_is_forbidden(client):
    response = client.get("/api/profile", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 403
    assert response.json() == {"message": "Invalid token"}


def test_profile_of_deleted_user_is_not_found(client, make_user, db_session):
    from app.models.activity import Activity
    from app.models.user import User

    user_id, headers = make_user("alice@example.com")
    db_session.query(Activity).filter(Activity.user_id == user_id).delete()
    db_session.query(User).filter(User.id == user_id).delete()
    db_session.commit()

    response = client.get("/api/profile", headers=headers)

    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


def test_logged_out_token_is_rejected(client, make_user):
    _, headers = make_user("alice@example.com")

    response = client.post("/api/logout", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}

    response = client.get("/api/profile", headers=headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token. Please log in again."


def test_logout_only_revokes_the_used_token(client, make_user):
    make_user("alice@example.com")
    first = {"Authorization": f"Bearer {signin(client, 'alice@example.com').json()['token']}"}
    second = {"Authorization": f"Bearer {signin(client, 'alice@example.com').json()['token']}"}

    client.post("/api/logout", headers=first)

    assert client.get("/api/profile", headers=first).status_code == 401
    assert client.get("/api/profile", headers=second).status_code == 200
