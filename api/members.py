"""
Member (staff) accounts blueprint, mounted at /member.

Supervisors create Creator accounts and manage members; both roles log in
here and get the same token pair flow as users, with the refresh token in
the `memberRefreshToken` cookie.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort, make_response
from marshmallow import EXCLUDE

from models import storage
from models.member import Member
from models.user import User
from models.schemas.member import (
    MemberCreateSchema,
    MemberUpdateSchema,
    MemberOutSchema,
    MemberFilterSchema,
)
from models.schemas.user import LoginSchema, UserOutSchema
from api.utils.cookies import MEMBER_REFRESH_COOKIE, read_refresh_token, set_refresh_cookie, clear_refresh_cookie
from api.utils.pagination import parse_pagination, paginate
from utils.decorators import authorize
from utils.principal import Role
from utils.security import hash_password, verify_password
from utils.sessions import SessionError, start_session, rotate_session, end_session

bp = Blueprint("member", __name__, url_prefix="/member")

member_create_schema = MemberCreateSchema()
member_update_schema = MemberUpdateSchema()
member_out_schema = MemberOutSchema()
members_out_schema = MemberOutSchema(many=True)
member_filter_schema = MemberFilterSchema()
login_schema = LoginSchema()
user_out_schema = UserOutSchema()
users_out_schema = UserOutSchema(many=True)


def _email_taken(session, email: str, exclude_id: str | None = None) -> bool:
    q = session.query(Member).filter(Member.email == email)
    if exclude_id:
        q = q.filter(Member.id != exclude_id)
    return session.query(q.exists()).scalar()


def create_member(first_name: str, last_name: str, email: str, password: str, role: Role = Role.CREATOR) -> Member:
    """Create and commit a member; raises ValueError if the email is taken."""
    if _email_taken(storage.get_session(), email):
        raise ValueError("Member account with this email already exists")
    member = Member(
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    storage.new(member)
    storage.save()
    return member


def _get_member_or_404(member_id: str) -> Member:
    member = storage.get(Member, member_id)
    if member is None:
        abort(404, description="Member not found")
    return member


def _session_response(pair, status: int = 200):
    response = make_response(jsonify(pair.to_dict()), status)
    return set_refresh_cookie(response, MEMBER_REFRESH_COOKIE, pair.refresh_token)


@bp.post("")
@authorize(Role.SUPERVISOR)
def create():
    """
    Create a Creator member account (Supervisor only)
    ---
    tags:
      - Member
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [firstName, lastName, email, password]
          properties:
            firstName: { type: string }
            lastName: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      201: { description: Created }
      403: { description: Forbidden }
      409: { description: Email already registered }
    """
    data = member_create_schema.load(request.get_json(silent=True) or {})
    try:
        member = create_member(data["first_name"], data["last_name"], data["email"], data["password"])
    except ValueError as exc:
        abort(409, description=str(exc))
    return jsonify(member_out_schema.dump(member)), 201


@bp.post("/login")
def login():
    """
    Log in as a member
    ---
    tags:
      - Member
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
      200: { description: OK (returns tokens) }
      400: { description: Invalid email or password }
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    session = storage.get_session()
    member = session.query(Member).filter(Member.email == data["email"]).first()
    if not member or not verify_password(data["password"], member.password_hash):
        abort(400, description="Invalid email or password")
    return _session_response(start_session(member))


@bp.route("/logout", methods=["GET", "POST"])
def logout():
    token = read_refresh_token(MEMBER_REFRESH_COOKIE)
    response = make_response("", 200)
    if not token:
        return response
    end_session(token, "member")
    return clear_refresh_cookie(response, MEMBER_REFRESH_COOKIE)


@bp.get("/refresh")
def refresh():
    """
    Exchange the member refresh token for a new token pair
    ---
    tags:
      - Member
    responses:
      200: { description: New token pair }
      400: { description: Refresh token is missing }
      401: { description: Refresh token invalid, expired or already used }
    """
    token = read_refresh_token(MEMBER_REFRESH_COOKIE)
    if not token:
        abort(400, description="Refresh token is missing")
    try:
        pair = rotate_session(token, "member")
    except SessionError as exc:
        abort(401, description=str(exc))
    return _session_response(pair)


@bp.get("/profile")
@authorize(Role.CREATOR)
def get_profile():
    return jsonify(member_out_schema.dump(_get_member_or_404(g.principal.id))), 200


@bp.put("/profile")
@authorize(Role.CREATOR)
def update_profile():
    """
    Update current member's profile
    ---
    tags:
      - Member
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            firstName: { type: string }
            lastName: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      200: { description: OK }
      409: { description: Email already in use }
    """
    member = _get_member_or_404(g.principal.id)
    data = member_update_schema.load(request.get_json(silent=True) or {})
    if "email" in data and _email_taken(storage.get_session(), data["email"], exclude_id=member.id):
        abort(409, description="Member account with this email already exists")
    if "password" in data:
        member.password_hash = hash_password(data.pop("password"))
    for field, value in data.items():
        setattr(member, field, value)
    storage.new(member)
    storage.save()
    return jsonify(member_out_schema.dump(member)), 200


@bp.delete("/profile")
@authorize(Role.CREATOR)
def delete_profile():
    member = _get_member_or_404(g.principal.id)
    storage.delete(member)
    storage.save()
    response = make_response(jsonify({"message": f"Member {member.id} has been deleted"}), 200)
    return clear_refresh_cookie(response, MEMBER_REFRESH_COOKIE)


@bp.delete("/<member_id>")
@authorize(Role.SUPERVISOR)
def delete_by_id(member_id: str):
    """
    Delete a member account (Supervisor only)
    A supervisor can delete itself or any Creator, never another Supervisor.
    ---
    tags:
      - Member
    security:
      - Bearer: []
    parameters:
      - in: path
        name: member_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      403: { description: Target is another Supervisor }
      404: { description: Member not found }
    """
    member = _get_member_or_404(member_id)
    if member.id != g.principal.id and member.role is Role.SUPERVISOR:
        abort(403, description="Supervisors cannot delete other supervisors")
    storage.delete(member)
    storage.save()
    return jsonify({"message": f"Member {member.id} has been deleted"}), 200


@bp.get("/members")
@authorize(Role.SUPERVISOR)
def list_members():
    """
    List member accounts (Supervisor only)
    ---
    tags:
      - Member
    security:
      - Bearer: []
    parameters:
      - { in: query, name: firstName, type: string }
      - { in: query, name: lastName, type: string }
      - { in: query, name: role, type: string, enum: [Supervisor, Creator] }
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
    responses:
      200: { description: OK }
    """
    filters = member_filter_schema.load(request.args.to_dict(), unknown=EXCLUDE)
    page, limit = parse_pagination(default_limit=10)

    query = storage.get_session().query(Member)
    if "first_name" in filters:
        query = query.filter(Member.first_name == filters["first_name"])
    if "last_name" in filters:
        query = query.filter(Member.last_name == filters["last_name"])
    if "role" in filters:
        query = query.filter(Member.role == Role(filters["role"]))

    rows, meta = paginate(query, (Member.created_at.desc(),), page, limit)
    return jsonify({"data": members_out_schema.dump(rows), "meta": meta}), 200


@bp.get("/members/<member_id>")
@authorize(Role.SUPERVISOR)
def get_member(member_id: str):
    return jsonify(member_out_schema.dump(_get_member_or_404(member_id))), 200


@bp.get("/members/users")
@authorize(Role.SUPERVISOR)
def list_users():
    """
    List user accounts (Supervisor only)
    ---
    tags:
      - Member
    security:
      - Bearer: []
    parameters:
      - { in: query, name: name, type: string }
      - { in: query, name: location, type: string }
    responses:
      200: { description: OK }
    """
    page, limit = parse_pagination(default_limit=50)
    query = storage.get_session().query(User)
    if request.args.get("name"):
        query = query.filter(User.name == request.args["name"])
    if request.args.get("location"):
        query = query.filter(User.location == request.args["location"])
    rows, meta = paginate(query, (User.created_at.desc(),), page, limit)
    return jsonify({"data": users_out_schema.dump(rows), "meta": meta}), 200


@bp.get("/members/users/<user_id>")
@authorize(Role.SUPERVISOR)
def get_user(user_id: str):
    user = storage.get(User, user_id)
    if user is None:
        abort(404, description="User not found")
    return jsonify(user_out_schema.dump(user)), 200
