from marshmallow import fields

from rupay.extensions import ma
from rupay.utils.clock import iso_z


class NotificationSchema(ma.Schema):
    id = fields.String()
    type = fields.String()
    title = fields.String()
    message = fields.String()
    details = fields.Raw(allow_none=True)
    is_read = fields.Boolean()
    created_at = fields.Function(lambda obj: iso_z(obj.created_at))
