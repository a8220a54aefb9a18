from __future__ import annotations

from flask import Blueprint, request, jsonify, abort
from sqlalchemy import func

from models import storage
from models.ingredient import Ingredient
from models.schemas.ingredient import (
    IngredientCreateSchema,
    IngredientUpdateSchema,
    IngredientOutSchema,
)
from api.utils.pagination import parse_pagination, paginate
from utils.decorators import authorize
from utils.principal import Role

bp = Blueprint("ingredients", __name__, url_prefix="/ingredients")

create_schema = IngredientCreateSchema()
update_schema = IngredientUpdateSchema()
out_schema = IngredientOutSchema()
out_list_schema = IngredientOutSchema(many=True)


def exists_name_case_insensitive(session, name: str, exclude_id: str | None = None) -> bool:
    q = session.query(Ingredient).filter(func.lower(Ingredient.name) == name.lower())
    if exclude_id:
        q = q.filter(Ingredient.id != exclude_id)
    return session.query(q.exists()).scalar()


def _get_or_404(ingredient_id: str) -> Ingredient:
    ingredient = storage.get(Ingredient, ingredient_id)
    if ingredient is None:
        abort(404, description="Ingredient not found")
    return ingredient


@bp.get("")
def list_ingredients():
    """
    List ingredients (pagination, q search, type filter)
    ---
    tags: [Ingredients]
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 20 }
      - { in: query, name: q, type: string }
      - { in: query, name: type, type: string }
    responses:
      200: { description: OK }
    """
    page, limit = parse_pagination()
    query = storage.get_session().query(Ingredient)
    q = request.args.get("q")
    if q:
        query = query.filter(func.lower(Ingredient.name).like(f"%{q.strip().lower()}%"))
    if request.args.get("type"):
        query = query.filter(Ingredient.type == request.args["type"])
    rows, meta = paginate(query, (Ingredient.name.asc(),), page, limit)
    return jsonify({"data": out_list_schema.dump(rows), "meta": meta})


@bp.get("/<ingredient_id>")
def get_ingredient(ingredient_id: str):
    return jsonify({"data": out_schema.dump(_get_or_404(ingredient_id))})


@bp.post("")
@authorize(Role.CREATOR)
def create_ingredient():
    """
    Create an ingredient
    ---
    tags: [Ingredients]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            name: { type: string, maxLength: 150 }
            type: { type: string, maxLength: 150 }
            description: { type: string }
    responses:
      201: { description: Created }
      409: { description: Name already exists }
      422: { description: Validation error }
    """
    session = storage.get_session()
    data = create_schema.load(request.get_json(silent=True) or {})
    if exists_name_case_insensitive(session, data["name"]):
        abort(409, description="Ingredient name already exists.")
    ingredient = Ingredient(**data)
    storage.new(ingredient)
    storage.save()
    return jsonify({"data": out_schema.dump(ingredient)}), 201


@bp.put("/<ingredient_id>")
@authorize(Role.CREATOR)
def update_ingredient(ingredient_id: str):
    session = storage.get_session()
    ingredient = _get_or_404(ingredient_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    if "name" in data and exists_name_case_insensitive(session, data["name"], exclude_id=ingredient.id):
        abort(409, description="Ingredient name already exists.")
    for field, value in data.items():
        setattr(ingredient, field, value)
    storage.new(ingredient)
    storage.save()
    return jsonify({"data": out_schema.dump(ingredient)})


@bp.delete("/<ingredient_id>")
@authorize(Role.CREATOR)
def delete_ingredient(ingredient_id: str):
    """
    Delete an ingredient (also removes it from every recipe)
    ---
    tags: [Ingredients]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: ingredient_id
        type: string
        required: true
    responses:
      204: { description: Deleted }
      404: { description: Not found }
    """
    ingredient = _get_or_404(ingredient_id)
    storage.delete(ingredient)
    storage.save()
    return ("", 204)
