from marshmallow import fields, validate

from rupay.extensions import ma
from rupay.models.status import InvestmentStatus
from rupay.utils.clock import iso_z


class InvestmentSchema(ma.Schema):
    id = fields.String()
    user_id = fields.String()
    user_name = fields.String()
    user_phone = fields.String(allow_none=True)
    plan_id = fields.String()
    plan_title = fields.String()
    investment_amount = fields.Float()
    daily_profit_min = fields.Float()
    daily_profit_max = fields.Float()
    duration_days = fields.Integer()
    transaction_proof_url = fields.String()
    status = fields.Enum(InvestmentStatus, by_value=True)
    rejection_reason = fields.String(allow_none=True)
    referral_bonus_percent = fields.Float()

    submission_date = fields.Function(lambda obj: iso_z(obj.submission_date))
    approval_date = fields.Function(lambda obj: iso_z(obj.approval_date))
    completed_at = fields.Function(lambda obj: iso_z(obj.completed_at))

    # derived, never stored
    maturity_date = fields.Function(lambda obj: iso_z(obj.maturity_date))
    is_active = fields.Function(lambda obj: obj.is_active())
    is_matured = fields.Function(lambda obj: obj.is_matured())
    display_status = fields.Function(lambda obj: obj.display_status())


class InvestmentSubmitSchema(ma.Schema):
    plan_id = fields.String(required=True, validate=validate.Length(min=1))
    amount = fields.Decimal(required=True, allow_nan=False)


class RejectionSchema(ma.Schema):
    reason = fields.String(required=True, validate=validate.Length(min=1, max=500))
