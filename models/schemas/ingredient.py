from marshmallow import Schema, fields, validate


class IngredientCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=150))
    type = fields.String(required=True, validate=validate.Length(min=1, max=150))
    description = fields.String(allow_none=True)


class IngredientUpdateSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=150))
    type = fields.String(validate=validate.Length(min=1, max=150))
    description = fields.String(allow_none=True)


class IngredientOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    type = fields.String()
    description = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
