import uuid

from rupay.extensions import db
from rupay.models.status import WithdrawalStatus, PaymentMethod, enum_column
from rupay.utils.clock import utcnow


def gen_withdrawal_id():
    return f"wd_{uuid.uuid4().hex[:12]}"


class WithdrawalRequest(db.Model):
    __tablename__ = "withdrawals"

    id = db.Column(db.String(50), primary_key=True, default=gen_withdrawal_id)
    user_id = db.Column(db.String(50), db.ForeignKey("users.id"), nullable=False, index=True)
    user_name = db.Column(db.String(255))
    user_phone = db.Column(db.String(20))

    investment_id = db.Column(db.String(50), db.ForeignKey("investments.id"), nullable=False, index=True)
    investment_title = db.Column(db.String(100))

    withdrawal_amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method = db.Column(enum_column(PaymentMethod, "payment_method"), nullable=False)
    account_number = db.Column(db.String(50), nullable=False)

    request_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    status = db.Column(
        enum_column(WithdrawalStatus, "withdrawal_status"),
        nullable=False,
        default=WithdrawalStatus.PENDING,
        index=True,
    )
    processed_date = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.String(500), nullable=True)
    transaction_id = db.Column(db.String(100), nullable=True)

    user = db.relationship("User", backref="withdrawals")
    investment = db.relationship("Investment", backref=db.backref("withdrawals", lazy="dynamic"))

    def __repr__(self) -> str:
        return f"<WithdrawalRequest id={self.id} investment_id={self.investment_id} status={self.status}>"

    @property
    def is_pending(self) -> bool:
        return self.status == WithdrawalStatus.PENDING

    @property
    def is_final(self) -> bool:
        return self.status.is_terminal
