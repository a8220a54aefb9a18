"""Helpers shared by the cocktail and meal blueprints."""
from __future__ import annotations

from typing import List

from flask import abort, request
from sqlalchemy import func

from models import storage
from models.ingredient import Ingredient


def search(query, model):
    """Apply ?q= (case-insensitive name search) to a recipe query."""
    q = request.args.get("q")
    if q:
        query = query.filter(func.lower(model.name).like(f"%{q.strip().lower()}%"))
    return query


def get_or_404(model, recipe_id: str, label: str):
    recipe = storage.get(model, recipe_id)
    if recipe is None:
        abort(404, description=f"{label} not found")
    return recipe


def set_ingredients(recipe, link_model, items: List[dict]) -> None:
    """
    Add or update ingredient links on a recipe. Existing links for the same
    ingredient get their amount replaced; unknown ingredient ids abort 400.
    """
    wanted = {item["ingredient_id"]: item["amount"] for item in items}
    if not wanted:
        return
    found = storage.get_session().query(Ingredient.id).filter(Ingredient.id.in_(wanted)).all()
    if len(found) != len(wanted):
        abort(400, description="One or more ingredientId values not found")

    current = {link.ingredient_id: link for link in recipe.ingredients}
    for ingredient_id, amount in wanted.items():
        link = current.get(ingredient_id)
        if link is None:
            recipe.ingredients.append(link_model(ingredient_id=ingredient_id, amount=amount))
        else:
            link.amount = amount


def remove_ingredient(recipe, ingredient_id: str) -> None:
    for link in list(recipe.ingredients):
        if link.ingredient_id == ingredient_id:
            recipe.ingredients.remove(link)
            return
    abort(404, description="Ingredient is not part of this recipe")


def find_review(review_model, fk_column, recipe_id: str, user_id: str):
    return (
        storage.get_session()
        .query(review_model)
        .filter(fk_column == recipe_id, review_model.user_id == user_id)
        .first()
    )
