from marshmallow import Schema, fields, pre_load, validate


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class EmailNormalizingSchema(Schema):
    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data


class UserCreateSchema(EmailNormalizingSchema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6, max=50))


class LoginSchema(EmailNormalizingSchema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6, max=50))


class UserUpdateSchema(EmailNormalizingSchema):
    name = fields.String(validate=validate.Length(min=1, max=255))
    email = fields.Email()
    password = fields.String(load_only=True, validate=validate.Length(min=6, max=50))
    location = fields.String(allow_none=True, validate=validate.Length(max=255))
    photo = fields.Url(allow_none=True)


class UserOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    email = fields.String()
    location = fields.String(allow_none=True)
    photo = fields.String(allow_none=True)
    created_at = fields.DateTime()


class SaveRecipeSchema(Schema):
    cocktail_id = fields.String(data_key="cocktailId", validate=validate.Length(min=1, max=255))
    meal_id = fields.String(data_key="mealId", validate=validate.Length(min=1, max=255))
