from marshmallow import fields, validate

from rupay.extensions import ma


class RegisterSchema(ma.Schema):
    # phone number or email
    email = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True)
    display_name = fields.String(load_default=None)
    phone = fields.String(load_default=None)
    referral_code = fields.String(load_default=None)


class LoginSchema(ma.Schema):
    email = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True)


class IdentitySchema(ma.Schema):
    uid = fields.String()
    email = fields.String()
    display_name = fields.String(allow_none=True)
