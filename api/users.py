"""
User accounts blueprint (mounted at /user):
- POST /user/register, POST /user/login
- GET  /user/logout,   GET  /user/refresh      (refresh token via cookie)
- GET/PUT/DELETE /user/profile
- saved cocktails / meals, and the user's own reviews

Tokens:
- short-lived access token returned in the body, sent back as `Authorization: Bearer`
- long-lived refresh token returned in the body and as the `userRefreshToken`
  httpOnly cookie; it is stored server-side and rotated on every refresh
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort, make_response

from models import storage
from models.user import User
from models.cocktail import Cocktail
from models.meal import Meal
from models.review import CocktailReview, MealReview
from models.schemas.user import (
    UserCreateSchema,
    UserOutSchema,
    LoginSchema,
    UserUpdateSchema,
    SaveRecipeSchema,
)
from models.schemas.recipe import CocktailOutSchema, MealOutSchema
from models.schemas.review import ReviewOutSchema
from api.utils.cookies import USER_REFRESH_COOKIE, read_refresh_token, set_refresh_cookie, clear_refresh_cookie
from utils.decorators import authorize
from utils.principal import Role
from utils.security import hash_password, verify_password
from utils.sessions import SessionError, start_session, rotate_session, end_session

bp = Blueprint("user", __name__, url_prefix="/user")

user_create_schema = UserCreateSchema()
user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()
login_schema = LoginSchema()
save_recipe_schema = SaveRecipeSchema()
cocktails_out_schema = CocktailOutSchema(many=True)
meals_out_schema = MealOutSchema(many=True)
reviews_out_schema = ReviewOutSchema(many=True)


def _email_taken(session, email: str, exclude_id: str | None = None) -> bool:
    q = session.query(User).filter(User.email == email)
    if exclude_id:
        q = q.filter(User.id != exclude_id)
    return session.query(q.exists()).scalar()


def _current_user() -> User:
    user = storage.get(User, g.principal.id)
    if user is None:
        abort(404, description="User not found")
    return user


def _session_response(pair, status: int = 200, **extra):
    body = pair.to_dict()
    body.update(extra)
    response = make_response(jsonify(body), status)
    return set_refresh_cookie(response, USER_REFRESH_COOKIE, pair.refresh_token)


@bp.post("/register")
def register():
    """
    Register a new user account and start a session
    ---
    tags:
      - User
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [name, email, password]
          properties:
            name: { type: string }
            email: { type: string }
            password: { type: string, minLength: 6, maxLength: 50 }
    responses:
      201:
        description: Created; returns accessToken, refreshToken and the user
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    data = user_create_schema.load(request.get_json(silent=True) or {})

    session = storage.get_session()
    if _email_taken(session, data["email"]):
        abort(409, description="User account with this email already exists")

    user = User(
        name=data["name"].strip(),
        email=data["email"],
        password_hash=hash_password(data["password"]),
    )
    storage.new(user)
    storage.save()

    pair = start_session(user)
    return _session_response(pair, 201, user=user_out_schema.dump(user))


@bp.post("/login")
def login():
    """
    Log in as a user
    ---
    tags:
      - User
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Invalid email or password
    """
    data = login_schema.load(request.get_json(silent=True) or {})

    session = storage.get_session()
    user = session.query(User).filter(User.email == data["email"]).first()
    # same answer for unknown email and wrong password
    if not user or not verify_password(data["password"], user.password_hash):
        abort(400, description="Invalid email or password")

    return _session_response(start_session(user))


@bp.route("/logout", methods=["GET", "POST"])
def logout():
    """
    Log out: forget the refresh token from the cookie
    ---
    tags:
      - User
    responses:
      200:
        description: Logged out (also when there was no session)
    """
    token = read_refresh_token(USER_REFRESH_COOKIE)
    response = make_response("", 200)
    if not token:
        return response
    end_session(token, "user")
    return clear_refresh_cookie(response, USER_REFRESH_COOKIE)


@bp.get("/refresh")
def refresh():
    """
    Exchange the refresh token for a new token pair (rotation)
    ---
    tags:
      - User
    responses:
      200:
        description: New accessToken and refreshToken
      400:
        description: Refresh token is missing
      401:
        description: Refresh token invalid, expired or already used
    """
    token = read_refresh_token(USER_REFRESH_COOKIE)
    if not token:
        abort(400, description="Refresh token is missing")
    try:
        pair = rotate_session(token, "user")
    except SessionError as exc:
        abort(401, description=str(exc))
    return _session_response(pair)


@bp.get("/profile")
@authorize(Role.USER)
def get_profile():
    """
    Current user's profile
    ---
    tags:
      - User
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      403:
        description: Forbidden
    """
    return jsonify(user_out_schema.dump(_current_user())), 200


@bp.put("/profile")
@authorize(Role.USER)
def update_profile():
    """
    Update current user's profile
    ---
    tags:
      - User
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            email: { type: string }
            password: { type: string }
            location: { type: string }
            photo: { type: string }
    responses:
      200: { description: OK }
      409: { description: Email already in use }
    """
    user = _current_user()
    data = user_update_schema.load(request.get_json(silent=True) or {})

    if "email" in data and _email_taken(storage.get_session(), data["email"], exclude_id=user.id):
        abort(409, description="User account with this email already exists")
    if "password" in data:
        user.password_hash = hash_password(data.pop("password"))
    for field, value in data.items():
        setattr(user, field, value)

    storage.new(user)
    storage.save()
    return jsonify(user_out_schema.dump(user)), 200


@bp.delete("/profile")
@authorize(Role.USER)
def delete_profile():
    """
    Delete current user's account (and all of its sessions)
    ---
    tags:
      - User
    security:
      - Bearer: []
    responses:
      200: { description: Deleted }
    """
    user = _current_user()
    storage.delete(user)
    storage.save()
    response = make_response(jsonify({"message": f"User {user.id} has been deleted"}), 200)
    return clear_refresh_cookie(response, USER_REFRESH_COOKIE)


@bp.get("/saved/cocktails")
@authorize(Role.USER)
def get_saved_cocktails():
    """
    Cocktails saved by the current user
    ---
    tags:
      - User
    security:
      - Bearer: []
    responses:
      200: { description: OK }
    """
    return jsonify({"data": cocktails_out_schema.dump(_current_user().saved_cocktails)}), 200


@bp.put("/saved/cocktails")
@authorize(Role.USER)
def save_cocktail():
    """
    Add a cocktail to the saved list
    ---
    tags:
      - User
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            cocktailId: { type: string }
    responses:
      200: { description: OK }
      404: { description: Cocktail not found }
    """
    data = save_recipe_schema.load(request.get_json(silent=True) or {})
    if not data.get("cocktail_id"):
        abort(422, description="cocktailId is required")
    cocktail = storage.get(Cocktail, data["cocktail_id"])
    if cocktail is None:
        abort(404, description="Cocktail not found")

    user = _current_user()
    if cocktail not in user.saved_cocktails:
        user.saved_cocktails.append(cocktail)
        storage.save()
    return jsonify({"data": cocktails_out_schema.dump(user.saved_cocktails)}), 200


@bp.delete("/saved/cocktails/<cocktail_id>")
@authorize(Role.USER)
def unsave_cocktail(cocktail_id: str):
    user = _current_user()
    user.saved_cocktails = [c for c in user.saved_cocktails if c.id != cocktail_id]
    storage.save()
    return jsonify({"message": f"Cocktail {cocktail_id} has been removed from saved cocktails"}), 200


@bp.get("/saved/meals")
@authorize(Role.USER)
def get_saved_meals():
    """
    Meals saved by the current user
    ---
    tags:
      - User
    security:
      - Bearer: []
    responses:
      200: { description: OK }
    """
    return jsonify({"data": meals_out_schema.dump(_current_user().saved_meals)}), 200


@bp.put("/saved/meals")
@authorize(Role.USER)
def save_meal():
    data = save_recipe_schema.load(request.get_json(silent=True) or {})
    if not data.get("meal_id"):
        abort(422, description="mealId is required")
    meal = storage.get(Meal, data["meal_id"])
    if meal is None:
        abort(404, description="Meal not found")

    user = _current_user()
    if meal not in user.saved_meals:
        user.saved_meals.append(meal)
        storage.save()
    return jsonify({"data": meals_out_schema.dump(user.saved_meals)}), 200


@bp.delete("/saved/meals/<meal_id>")
@authorize(Role.USER)
def unsave_meal(meal_id: str):
    user = _current_user()
    user.saved_meals = [m for m in user.saved_meals if m.id != meal_id]
    storage.save()
    return jsonify({"message": f"Meal {meal_id} has been removed from saved meals"}), 200


@bp.get("/cocktail-reviews")
@authorize(Role.USER)
def get_cocktail_reviews():
    session = storage.get_session()
    rows = (
        session.query(CocktailReview)
        .filter(CocktailReview.user_id == g.principal.id)
        .order_by(CocktailReview.created_at.desc())
        .all()
    )
    return jsonify({"data": reviews_out_schema.dump(rows)}), 200


@bp.get("/meal-reviews")
@authorize(Role.USER)
def get_meal_reviews():
    session = storage.get_session()
    rows = (
        session.query(MealReview)
        .filter(MealReview.user_id == g.principal.id)
        .order_by(MealReview.created_at.desc())
        .all()
    )
    return jsonify({"data": reviews_out_schema.dump(rows)}), 200
