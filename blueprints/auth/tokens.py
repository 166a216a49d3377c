from __future__ import annotations
from datetime import datetime, timedelta, UTC

from flask import current_app
from jose import JWTError, jwt

from blueprints.core.errors import BadRequest, Unauthorized

ALGORITHM = "HS256"

PURPOSE_CONFIRM = "confirm"
PURPOSE_RESET = "reset"
PURPOSE_ADMIN_RESET = "admin_reset"


def create_access_token(user_id: int, *, is_admin: bool, role_id: int = 0) -> str:
    """JWT для Authorization: Bearer. sub строкой, rl = 0 у студентов."""
    if user_id < 1:
        raise ValueError("user id must be a positive integer")
    now = datetime.now(UTC)
    claims = {
        "sub": str(user_id),
        "adm": bool(is_admin),
        "rl": int(role_id) if is_admin else 0,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=current_app.config["JWT_VALIDITY_DAYS"])).timestamp()),
    }
    return jwt.encode(claims, current_app.config["JWT_SECRET"], algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        claims = jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=[ALGORITHM])
    except JWTError as exc:
        raise Unauthorized("Invalid or expired token", detail=str(exc)) from exc
    sub = claims.get("sub")
    if not isinstance(sub, str) or not sub.isdigit() or int(sub) < 1:
        raise Unauthorized("Invalid or expired token", detail=f"bad sub claim: {sub!r}")
    return claims


# ---------- одноразовые ссылки из писем ----------
def create_email_token(email: str, purpose: str) -> str:
    now = datetime.now(UTC)
    hours = current_app.config.get("EMAIL_TOKEN_VALIDITY_HOURS", 24)
    claims = {
        "email": email,
        "purpose": purpose,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=hours)).timestamp()),
    }
    return jwt.encode(claims, current_app.config["EMAIL_TOKEN_SECRET"], algorithm=ALGORITHM)


def decode_email_token(token: str, purpose: str) -> str:
    """Возвращает email из токена; чужая цель или истёкший токен → 400."""
    try:
        claims = jwt.decode(token, current_app.config["EMAIL_TOKEN_SECRET"], algorithms=[ALGORITHM])
    except JWTError as exc:
        raise BadRequest("Invalid or expired token", detail=str(exc)) from exc
    if claims.get("purpose") != purpose or not claims.get("email"):
        raise BadRequest("Invalid or expired token", detail=f"token purpose {claims.get('purpose')!r} != {purpose!r}")
    return claims["email"]
