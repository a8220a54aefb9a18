from __future__ import annotations

from flask import Blueprint, request, jsonify, g, abort
from sqlalchemy import func

from models import storage
from models.meal import Meal, MealIngredient
from models.review import MealReview
from models.schemas.recipe import (
    MealCreateSchema,
    MealUpdateSchema,
    MealOutSchema,
    IngredientListSchema,
)
from models.schemas.review import ReviewInSchema, ReviewOutSchema
from api.utils.pagination import parse_pagination, paginate
from api.utils import recipes
from utils.decorators import authorize
from utils.principal import Role

bp = Blueprint("meals", __name__, url_prefix="/meals")

create_schema = MealCreateSchema()
update_schema = MealUpdateSchema()
out_schema = MealOutSchema()
out_list_schema = MealOutSchema(many=True)
ingredient_list_schema = IngredientListSchema()
review_in_schema = ReviewInSchema()
review_out_schema = ReviewOutSchema()
reviews_out_schema = ReviewOutSchema(many=True)


def _get_or_404(meal_id: str) -> Meal:
    return recipes.get_or_404(Meal, meal_id, "Meal")


@bp.get("")
def list_meals():
    """
    List meals
    ---
    tags: [Meals]
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 20 }
      - { in: query, name: q, type: string, description: "search by name" }
    responses:
      200: { description: OK }
    """
    page, limit = parse_pagination()
    query = recipes.search(storage.get_session().query(Meal), Meal)
    rows, meta = paginate(query, (Meal.name.asc(),), page, limit)
    return jsonify({"data": out_list_schema.dump(rows), "meta": meta})


@bp.get("/<meal_id>")
def get_meal(meal_id: str):
    return jsonify({"data": out_schema.dump(_get_or_404(meal_id))})


@bp.post("")
@authorize(Role.CREATOR)
def create_meal():
    """
    Create a meal
    ---
    tags: [Meals]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, cookingInstructions]
          properties:
            name: { type: string, maxLength: 100 }
            description: { type: string }
            cuisine: { type: string, maxLength: 20 }
            cookingInstructions: { type: string }
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
    # meal names are unique, unlike cocktail names
    if storage.get_session().query(Meal).filter(func.lower(Meal.name) == data["name"].lower()).first():
        abort(409, description="A meal with this name already exists.")
    meal = Meal(**data)
    recipes.set_ingredients(meal, MealIngredient, items)
    storage.new(meal)
    storage.save()
    return jsonify({"data": out_schema.dump(meal)}), 201


@bp.put("/<meal_id>")
@authorize(Role.CREATOR)
def update_meal(meal_id: str):
    meal = _get_or_404(meal_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    for field, value in data.items():
        setattr(meal, field, value)
    storage.new(meal)
    storage.save()
    return jsonify({"data": out_schema.dump(meal)})


@bp.put("/<meal_id>/ingredients")
@authorize(Role.CREATOR)
def set_meal_ingredients(meal_id: str):
    """
    Add ingredients to a meal or change their amounts
    ---
    tags: [Meals]
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
    meal = _get_or_404(meal_id)
    data = ingredient_list_schema.load(request.get_json(silent=True) or {})
    recipes.set_ingredients(meal, MealIngredient, data["ingredients"])
    storage.save()
    return jsonify({"data": out_schema.dump(meal)})


@bp.delete("/<meal_id>/ingredients/<ingredient_id>")
@authorize(Role.CREATOR)
def remove_meal_ingredient(meal_id: str, ingredient_id: str):
    meal = _get_or_404(meal_id)
    recipes.remove_ingredient(meal, ingredient_id)
    storage.save()
    return jsonify({"data": out_schema.dump(meal)})


@bp.delete("/<meal_id>")
@authorize(Role.CREATOR)
def delete_meal(meal_id: str):
    meal = _get_or_404(meal_id)
    storage.delete(meal)
    storage.save()
    return ("", 204)


@bp.get("/<meal_id>/reviews")
def list_reviews(meal_id: str):
    _get_or_404(meal_id)
    page, limit = parse_pagination()
    query = storage.get_session().query(MealReview).filter(MealReview.meal_id == meal_id)
    rows, meta = paginate(query, (MealReview.created_at.desc(),), page, limit)
    return jsonify({"data": reviews_out_schema.dump(rows), "meta": meta})


@bp.post("/<meal_id>/reviews")
@authorize(Role.USER)
def create_review(meal_id: str):
    """
    Review a meal (one review per user)
    ---
    tags: [Meals]
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
    _get_or_404(meal_id)
    data = review_in_schema.load(request.get_json(silent=True) or {})
    if recipes.find_review(MealReview, MealReview.meal_id, meal_id, g.principal.id):
        abort(409, description="You have already reviewed this meal")
    review = MealReview(meal_id=meal_id, user_id=g.principal.id, **data)
    storage.new(review)
    storage.save()
    return jsonify({"data": review_out_schema.dump(review)}), 201


@bp.put("/<meal_id>/reviews")
@authorize(Role.USER)
def update_review(meal_id: str):
    data = review_in_schema.load(request.get_json(silent=True) or {})
    review = recipes.find_review(MealReview, MealReview.meal_id, meal_id, g.principal.id)
    if review is None:
        abort(404, description="Review not found")
    review.rating = data["rating"]
    review.review = data["review"]
    storage.save()
    return jsonify({"data": review_out_schema.dump(review)})
