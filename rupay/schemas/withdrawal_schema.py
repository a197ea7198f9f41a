from marshmallow import fields, validate

from rupay.extensions import ma
from rupay.models.status import PaymentMethod, WithdrawalStatus
from rupay.utils.clock import iso_z


class WithdrawalSchema(ma.Schema):
    id = fields.String()
    user_id = fields.String()
    user_name = fields.String()
    user_phone = fields.String(allow_none=True)
    investment_id = fields.String()
    investment_title = fields.String()
    withdrawal_amount = fields.Float()
    payment_method = fields.Enum(PaymentMethod, by_value=True)
    account_number = fields.String()
    status = fields.Enum(WithdrawalStatus, by_value=True)
    status_label = fields.Function(lambda obj: obj.status.label)
    rejection_reason = fields.String(allow_none=True)
    transaction_id = fields.String(allow_none=True)

    request_date = fields.Function(lambda obj: iso_z(obj.request_date))
    processed_date = fields.Function(lambda obj: iso_z(obj.processed_date))


class WithdrawalRequestSchema(ma.Schema):
    investment_id = fields.String(required=True, validate=validate.Length(min=1))
    amount = fields.Decimal(required=True, allow_nan=False)
    payment_method = fields.String(
        required=True,
        validate=validate.OneOf([m.value for m in PaymentMethod]),
    )
    account_number = fields.String(required=True, validate=validate.Length(min=1, max=50))


class CompleteWithdrawalSchema(ma.Schema):
    transaction_id = fields.String(required=True, validate=validate.Length(min=1, max=100))
