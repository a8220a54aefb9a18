"""Refresh token transport: an httpOnly cookie, with a JSON body fallback."""
from flask import current_app, request

USER_REFRESH_COOKIE = "userRefreshToken"
MEMBER_REFRESH_COOKIE = "memberRefreshToken"


def read_refresh_token(cookie_name: str) -> str:
    token = request.cookies.get(cookie_name)
    if token:
        return token
    payload = request.get_json(silent=True) or {}
    token = payload.get("refreshToken") if isinstance(payload, dict) else None
    return token if isinstance(token, str) else ""


def set_refresh_cookie(response, cookie_name: str, token: str):
    response.set_cookie(
        cookie_name,
        token,
        max_age=int(current_app.config["COOKIE_MAX_AGE"].total_seconds()),
        httponly=True,
        secure=current_app.config.get("COOKIE_SECURE", False),
        samesite="Lax",
    )
    return response


def clear_refresh_cookie(response, cookie_name: str):
    response.delete_cookie(cookie_name, httponly=True)
    return response
