from datetime import timedelta
import uuid

from rupay.extensions import db
from rupay.models.status import InvestmentStatus, enum_column
from rupay.utils.clock import utcnow


def gen_investment_id():
    return f"inv-{uuid.uuid4().hex[:12]}"


class Investment(db.Model):
    __tablename__ = "investments"

    id = db.Column(db.String(50), primary_key=True, default=gen_investment_id)
    user_id = db.Column(db.String(50), db.ForeignKey("users.id"), nullable=False, index=True)

    # copied from the user profile at submission time; never re-synced
    user_name = db.Column(db.String(255))
    user_phone = db.Column(db.String(20))

    plan_id = db.Column(db.String(30), nullable=False)
    plan_title = db.Column(db.String(100), nullable=False)
    investment_amount = db.Column(db.Numeric(12, 2), nullable=False)
    daily_profit_min = db.Column(db.Numeric(5, 2), nullable=False)
    daily_profit_max = db.Column(db.Numeric(5, 2), nullable=False)
    duration_days = db.Column(db.Integer, nullable=False)
    transaction_proof_url = db.Column(db.String(1024), nullable=False)

    submission_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    status = db.Column(
        enum_column(InvestmentStatus, "investment_status"),
        nullable=False,
        default=InvestmentStatus.PENDING,
        index=True,
    )
    approval_date = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.String(500), nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    referral_bonus_percent = db.Column(db.Numeric(5, 2), nullable=False, default=0)

    user = db.relationship("User", backref=db.backref("investments", lazy="dynamic"))

    def __repr__(self) -> str:
        return f"<Investment id={self.id} user_id={self.user_id} amount={self.investment_amount} status={self.status}>"

    @property
    def maturity_date(self):
        if self.approval_date is None:
            return None
        return self.approval_date + timedelta(days=self.duration_days)

    def is_matured(self, now=None):
        if self.status == InvestmentStatus.COMPLETED:
            return True
        if self.status != InvestmentStatus.APPROVED:
            return False
        return self.maturity_date <= (now or utcnow())

    def is_active(self, now=None):
        return self.status == InvestmentStatus.APPROVED and not self.is_matured(now)

    def display_status(self, now=None):
        if self.status == InvestmentStatus.APPROVED and self.is_matured(now):
            return InvestmentStatus.COMPLETED.label
        return self.status.label
