from __future__ import annotations

import pytest
from jose import jwt

from blueprints.auth import tokens
from blueprints.core.errors import BadRequest, Unauthorized
from extensions import db
from mail import MailError, Mailer
from models import AvailableAdminRole, Blacklist, Student
from conftest import PASSWORD, auth, make_admin, make_student, mail_text, token_from_mail

SIGNUP = {
    "first_name": "Mario",
    "last_name": "Rossi",
    "email": "mario.rossi@studenti.unitn.it",
    "password": "pw-123456",
    "university_id": 424242,
}


# ---------- токены ----------
def test_access_token_claims(app):
    token = tokens.create_access_token(7, is_admin=True, role_id=2)
    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == "7" and claims["adm"] is True and claims["rl"] == 2
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600
    assert tokens.decode_access_token(token)["sub"] == "7"


def test_access_token_rejects_bad_input(app):
    with pytest.raises(ValueError):
        tokens.create_access_token(0, is_admin=False)
    with pytest.raises(Unauthorized):
        tokens.decode_access_token("not-a-jwt")
    forged = jwt.encode({"sub": "1"}, "other-secret", algorithm="HS256")
    with pytest.raises(Unauthorized):
        tokens.decode_access_token(forged)


def test_email_token_purpose_is_checked(app):
    token = tokens.create_email_token("a@b.c", tokens.PURPOSE_CONFIRM)
    assert tokens.decode_email_token(token, tokens.PURPOSE_CONFIRM) == "a@b.c"
    with pytest.raises(BadRequest):
        tokens.decode_email_token(token, tokens.PURPOSE_RESET)


# ---------- вход ----------
def test_admin_login(client):
    make_admin(email="root@uni.test")
    rv = client.post("/api/v1/admins/auth/login", json={"email": "ROOT@uni.test", "password": PASSWORD})
    assert rv.status_code == 200
    token = rv.get_json()["token"]
    me = client.get("/api/v1/admins/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.get_json()["email"] == "root@uni.test"


def test_admin_login_wrong_password(client):
    make_admin(email="root@uni.test")
    rv = client.post("/api/v1/admins/auth/login", json={"email": "root@uni.test", "password": "nope"})
    assert rv.status_code == 401
    assert rv.get_json()["error"] == "Incorrect email or password"


def test_student_token_cannot_reach_admin_routes(client):
    student = make_student()
    assert client.get("/api/v1/admins/users/me", headers=auth(student)).status_code == 403
    assert client.get("/api/v1/admins/users/me").status_code == 401


def test_garbage_bearer_is_unauthenticated(client):
    rv = client.get("/api/v1/students/users/me", headers={"Authorization": "Bearer garbage"})
    assert rv.status_code == 401
    assert rv.get_json()["error"] == "Authentication required"


# ---------- регистрация ----------
def test_signup_confirm_and_login(client, outbox):
    rv = client.post("/api/v1/students/auth/signup", json=SIGNUP)
    assert rv.status_code == 201
    student = db.session.get(Student, rv.get_json()["student_id"])
    assert student.is_pending

    assert len(outbox) == 1
    assert outbox[0]["Subject"] == "Confirm your account"
    assert "http://frontend.test/confirm?t=" in mail_text(outbox[0])

    rv = client.get(f"/api/v1/students/auth/confirm?t={token_from_mail(outbox[0])}")
    assert rv.status_code == 204
    db.session.refresh(student)
    assert not student.is_pending

    rv = client.post("/api/v1/students/auth/login", json={"email": SIGNUP["email"], "password": SIGNUP["password"]})
    assert rv.status_code == 200


def test_signup_rejects_foreign_domain(client, outbox):
    rv = client.post("/api/v1/students/auth/signup", json={**SIGNUP, "email": "mario@gmail.com"})
    assert rv.status_code == 400
    assert rv.get_json()["error"] == "Email domain not allowed for signup"
    assert outbox == []


def test_signup_rejects_empty_name(client, outbox):
    rv = client.post("/api/v1/students/auth/signup", json={**SIGNUP, "first_name": "  "})
    assert rv.status_code == 400
    assert rv.get_json()["error"] == "First name cannot be empty"


def test_signup_rejects_blacklisted(client, outbox):
    db.session.add(Blacklist(university_id=SIGNUP["university_id"], description="cheating",
                             first_name="Mario", last_name="Rossi"))
    db.session.commit()
    rv = client.post("/api/v1/students/auth/signup", json=SIGNUP)
    assert rv.status_code == 403


def test_signup_duplicates(client, outbox):
    assert client.post("/api/v1/students/auth/signup", json=SIGNUP).status_code == 201
    rv = client.post("/api/v1/students/auth/signup", json={**SIGNUP, "university_id": 1})
    assert rv.status_code == 409
    rv = client.post("/api/v1/students/auth/signup",
                     json={**SIGNUP, "email": "other@studenti.unitn.it"})
    assert rv.status_code == 409


def test_signup_skip_confirmation(app, client, outbox):
    app.config["SKIP_EMAIL_CONFIRMATION"] = True
    rv = client.post("/api/v1/students/auth/signup", json=SIGNUP)
    assert rv.status_code == 201
    assert outbox == []
    assert db.session.get(Student, rv.get_json()["student_id"]).is_pending is False


def test_signup_mail_failure_is_503(client, monkeypatch):
    def fail(self, message):
        raise MailError("smtp down")

    monkeypatch.setattr(Mailer, "_deliver", fail)
    rv = client.post("/api/v1/students/auth/signup", json=SIGNUP)
    assert rv.status_code == 503
    body = rv.get_json()
    assert "confirmation email could not be sent" in body["error"]
    assert body["log_id"]


def test_confirm_requires_token(client):
    assert client.get("/api/v1/students/auth/confirm").status_code == 400
    assert client.get("/api/v1/students/auth/confirm?t=bogus").status_code == 400


def test_allowed_domains(client):
    rv = client.get("/api/v1/students/auth/allowed-domains")
    assert rv.get_json() == {"domains": ["studenti.unitn.it"]}


# ---------- сброс пароля ----------
def test_student_password_reset(client, outbox):
    student = make_student()
    rv = client.post("/api/v1/students/auth/forgot-password", json={"email": student.email})
    assert rv.status_code == 204
    assert "http://frontend.test/password-reset?t=" in mail_text(outbox[0])

    token = token_from_mail(outbox[0])
    rv = client.post(f"/api/v1/students/auth/reset-password?t={token}", json={"new_password": "brand-new"})
    assert rv.status_code == 204
    rv = client.post("/api/v1/students/auth/login", json={"email": student.email, "password": "brand-new"})
    assert rv.status_code == 200


def test_forgot_password_unknown_email_is_silent(client, outbox):
    rv = client.post("/api/v1/students/auth/forgot-password", json={"email": "ghost@studenti.unitn.it"})
    assert rv.status_code == 204
    assert outbox == []


def test_admin_reset_token_not_valid_for_students(client, outbox):
    admin = make_admin(AvailableAdminRole.PROFESSOR)
    client.post("/api/v1/admins/auth/forgot-password", json={"email": admin.email})
    assert "/admin/password-reset?t=" in mail_text(outbox[0])
    token = token_from_mail(outbox[0])

    rv = client.post(f"/api/v1/students/auth/reset-password?t={token}", json={"new_password": "x1"})
    assert rv.status_code == 400
    rv = client.post(f"/api/v1/admins/auth/reset-password?t={token}", json={"new_password": "x1"})
    assert rv.status_code == 204


def test_frontend_url_escapes_query(app):
    app.config["APP_BASE_URL"] = "http://frontend.test/"
    assert Mailer.frontend_url("/confirm", t="a b&c=d") == "http://frontend.test/confirm?t=a+b%26c%3Dd"
    assert Mailer.frontend_url("admin/login") == "http://frontend.test/admin/login"
