from marshmallow import Schema, fields, validate


class ReviewInSchema(Schema):
    rating = fields.Integer(required=True, validate=validate.Range(min=1, max=5))
    review = fields.String(required=True, validate=validate.Length(min=1, max=2000))


class ReviewOutSchema(Schema):
    id = fields.String()
    user_id = fields.String(data_key="userId")
    cocktail_id = fields.String(data_key="cocktailId")
    meal_id = fields.String(data_key="mealId")
    rating = fields.Integer()
    review = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
