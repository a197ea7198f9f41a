from marshmallow import fields

from rupay.extensions import ma


class PlanSchema(ma.Schema):
    id = fields.String()
    title = fields.String()
    min_investment = fields.Float()
    max_investment = fields.Float()
    daily_profit_min = fields.Float()
    daily_profit_max = fields.Float()
    duration_days = fields.Integer()
    total_return_min = fields.Float()
    total_return_max = fields.Float()
    icon = fields.String()
    badge = fields.String(allow_none=True)
    primary = fields.Boolean()
