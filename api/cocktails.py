from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort

from models import storage
from models.cocktail import Cocktail, CocktailIngredient
from models.review import CocktailReview
from models.schemas.recipe import (
    CocktailCreateSchema,
    CocktailUpdateSchema,
    CocktailOutSchema,
    IngredientListSchema,
)
from models.schemas.review import ReviewInSchema, ReviewOutSchema
from api.utils.pagination import parse_pagination, paginate
from api.utils import recipes
from utils.decorators import authorize
from utils.principal import Role

bp = Blueprint("cocktails", __name__, url_prefix="/cocktails")

create_schema = CocktailCreateSchema()
update_schema = CocktailUpdateSchema()
out_schema = CocktailOutSchema()
out_list_schema = CocktailOutSchema(many=True)
ingredient_list_schema = IngredientListSchema()
review_in_schema = ReviewInSchema()
review_out_schema = ReviewOutSchema()
reviews_out_schema = ReviewOutSchema(many=True)


def _get_or_404(cocktail_id: str) -> Cocktail:
    return recipes.get_or_404(Cocktail, cocktail_id, "Cocktail")


@bp.get("")
def list_cocktails():
    """
    List cocktails
    ---
    tags: [Cocktails]
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 20 }
      - { in: query, name: q, type: string, description: "search by name" }
    responses:
      200: { description: OK }
    """
    page, limit = parse_pagination()
    query = recipes.search(storage.get_session().query(Cocktail), Cocktail)
    rows, meta = paginate(query, (Cocktail.name.asc(),), page, limit)
    return jsonify({"data": out_list_schema.dump(rows), "meta": meta})


@bp.get("/<cocktail_id>")
def get_cocktail(cocktail_id: str):
    return jsonify({"data": out_schema.dump(_get_or_404(cocktail_id))})


@bp.post("")
@authorize(Role.CREATOR)
def create_cocktail():
    """
    Create a cocktail
    ---
    tags: [Cocktails]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, method]
          properties:
            name: { type: string, maxLength: 100 }
            description: { type: string }
            method: { type: string }
            notesOnIngredients: { type: string }
            notesOnExecution: { type: string }
            notesOnTaste: { type: string }
            ingredients:
              type: array
              items:
                type: object
                properties:
                  ingredientId: { type: string }
                  amount: { type: string }
    responses:
      201: { description: Created }
      400: { description: Unknown ingredient }
      422: { description: Validation error }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    items = data.pop("ingredients")
    cocktail = Cocktail(**data)
    recipes.set_ingredients(cocktail, CocktailIngredient, items)
    storage.new(cocktail)
    storage.save()
    return jsonify({"data": out_schema.dump(cocktail)}), 201


@bp.put("/<cocktail_id>")
@authorize(Role.CREATOR)
def update_cocktail(cocktail_id: str):
    cocktail = _get_or_404(cocktail_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    for field, value in data.items():
        setattr(cocktail, field, value)
    storage.new(cocktail)
    storage.save()
    return jsonify({"data": out_schema.dump(cocktail)})


@bp.put("/<cocktail_id>/ingredients")
@authorize(Role.CREATOR)
def set_cocktail_ingredients(cocktail_id: str):
    """
    Add ingredients to a cocktail or change their amounts
    ---
    tags: [Cocktails]
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            ingredients:
              type: array
              items:
                type: object
                properties:
                  ingredientId: { type: string }
                  amount: { type: string }
    responses:
      200: { description: OK }
    """
    cocktail = _get_or_404(cocktail_id)
    data = ingredient_list_schema.load(request.get_json(silent=True) or {})
    recipes.set_ingredients(cocktail, CocktailIngredient, data["ingredients"])
    storage.save()
    return jsonify({"data": out_schema.dump(cocktail)})


@bp.delete("/<cocktail_id>/ingredients/<ingredient_id>")
@authorize(Role.CREATOR)
def remove_cocktail_ingredient(cocktail_id: str, ingredient_id: str):
    cocktail = _get_or_404(cocktail_id)
    recipes.remove_ingredient(cocktail, ingredient_id)
    storage.save()
    return jsonify({"data": out_schema.dump(cocktail)})


@bp.delete("/<cocktail_id>")
@authorize(Role.CREATOR)
def delete_cocktail(cocktail_id: str):
    cocktail = _get_or_404(cocktail_id)
    storage.delete(cocktail)
    storage.save()
    return ("", 204)


@bp.get("/<cocktail_id>/reviews")
def list_reviews(cocktail_id: str):
    _get_or_404(cocktail_id)
    page, limit = parse_pagination()
    query = storage.get_session().query(CocktailReview).filter(CocktailReview.cocktail_id == cocktail_id)
    rows, meta = paginate(query, (CocktailReview.created_at.desc(),), page, limit)
    return jsonify({"data": reviews_out_schema.dump(rows), "meta": meta})


@bp.post("/<cocktail_id>/reviews")
@authorize(Role.USER)
def create_review(cocktail_id: str):
    """
    Review a cocktail (one review per user)
    ---
    tags: [Cocktails]
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            rating: { type: integer, minimum: 1, maximum: 5 }
            review: { type: string, maxLength: 2000 }
    responses:
      201: { description: Created }
      409: { description: Already reviewed }
    """
    _get_or_404(cocktail_id)
    data = review_in_schema.load(request.get_json(silent=True) or {})
    if recipes.find_review(CocktailReview, CocktailReview.cocktail_id, cocktail_id, g.principal.id):
        abort(409, description="You have already reviewed this cocktail")
    review = CocktailReview(cocktail_id=cocktail_id, user_id=g.principal.id, **data)
    storage.new(review)
    storage.save()
    return jsonify({"data": review_out_schema.dump(review)}), 201


@bp.put("/<cocktail_id>/reviews")
@authorize(Role.USER)
def update_review(cocktail_id: str):
    data = review_in_schema.load(request.get_json(silent=True) or {})
    review = recipes.find_review(CocktailReview, CocktailReview.cocktail_id, cocktail_id, g.principal.id)
    if review is None:
        abort(404, description="Review not found")
    review.rating = data["rating"]
    review.review = data["review"]
    storage.save()
    return jsonify({"data": review_out_schema.dump(review)})
