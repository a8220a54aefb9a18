"""Schemas for cocktails and meals, which share the ingredient-amount shape."""
from marshmallow import Schema, fields, validate


class RecipeIngredientInSchema(Schema):
    ingredient_id = fields.String(required=True, data_key="ingredientId")
    amount = fields.String(required=True, validate=validate.Length(min=1, max=100))


class RecipeIngredientOutSchema(Schema):
    ingredient_id = fields.String(data_key="ingredientId")
    name = fields.Function(lambda link: link.ingredient.name if link.ingredient else None)
    type = fields.Function(lambda link: link.ingredient.type if link.ingredient else None)
    amount = fields.String()


class IngredientListSchema(Schema):
    ingredients = fields.List(fields.Nested(RecipeIngredientInSchema), required=True)


class CocktailCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    description = fields.String(allow_none=True)
    method = fields.String(required=True, validate=validate.Length(min=1))
    notes_on_ingredients = fields.String(allow_none=True, data_key="notesOnIngredients")
    notes_on_execution = fields.String(allow_none=True, data_key="notesOnExecution")
    notes_on_taste = fields.String(allow_none=True, data_key="notesOnTaste")
    ingredients = fields.List(fields.Nested(RecipeIngredientInSchema), load_default=list)


class CocktailUpdateSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=100))
    description = fields.String(allow_none=True)
    method = fields.String(validate=validate.Length(min=1))
    notes_on_ingredients = fields.String(allow_none=True, data_key="notesOnIngredients")
    notes_on_execution = fields.String(allow_none=True, data_key="notesOnExecution")
    notes_on_taste = fields.String(allow_none=True, data_key="notesOnTaste")


class CocktailOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    description = fields.String(allow_none=True)
    method = fields.String()
    notes_on_ingredients = fields.String(allow_none=True, data_key="notesOnIngredients")
    notes_on_execution = fields.String(allow_none=True, data_key="notesOnExecution")
    notes_on_taste = fields.String(allow_none=True, data_key="notesOnTaste")
    ingredients = fields.List(fields.Nested(RecipeIngredientOutSchema))
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class MealCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    description = fields.String(allow_none=True)
    cuisine = fields.String(allow_none=True, validate=validate.Length(max=20))
    cooking_instructions = fields.String(required=True, data_key="cookingInstructions", validate=validate.Length(min=1))
    ingredients = fields.List(fields.Nested(RecipeIngredientInSchema), load_default=list)


class MealUpdateSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=100))
    description = fields.String(allow_none=True)
    cuisine = fields.String(allow_none=True, validate=validate.Length(max=20))
    cooking_instructions = fields.String(data_key="cookingInstructions", validate=validate.Length(min=1))


class MealOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    description = fields.String(allow_none=True)
    cuisine = fields.String(allow_none=True)
    cooking_instructions = fields.String(data_key="cookingInstructions")
    ingredients = fields.List(fields.Nested(RecipeIngredientOutSchema))
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
