from marshmallow import Schema, fields, validate

from models.schemas.user import EmailNormalizingSchema
from utils.principal import MEMBER_ROLES


class MemberCreateSchema(EmailNormalizingSchema):
    first_name = fields.String(required=True, data_key="firstName", validate=validate.Length(min=1, max=50))
    last_name = fields.String(required=True, data_key="lastName", validate=validate.Length(min=1, max=50))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6, max=50))


class MemberUpdateSchema(EmailNormalizingSchema):
    first_name = fields.String(data_key="firstName", validate=validate.Length(min=1, max=50))
    last_name = fields.String(data_key="lastName", validate=validate.Length(min=1, max=50))
    email = fields.Email()
    password = fields.String(load_only=True, validate=validate.Length(min=6, max=50))


class MemberOutSchema(Schema):
    id = fields.String()
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")
    email = fields.String()
    role = fields.Function(lambda m: m.role.value if m.role is not None else None)
    created_at = fields.DateTime()


class MemberFilterSchema(Schema):
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")
    role = fields.String(validate=validate.OneOf([r.value for r in MEMBER_ROLES]))
