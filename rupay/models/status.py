import enum

from rupay.extensions import db


class InvestmentStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"

    @property
    def label(self):
        return INVESTMENT_STATUS_LABELS[self]

    @property
    def is_terminal(self):
        return self in (InvestmentStatus.REJECTED, InvestmentStatus.COMPLETED)


class WithdrawalStatus(str, enum.Enum):
    PENDING = "pending"
    # reserved; no transition produces it
    PROCESSING = "processing"
    COMPLETED = "completed"
    REJECTED = "rejected"

    @property
    def label(self):
        return WITHDRAWAL_STATUS_LABELS[self]

    @property
    def is_terminal(self):
        return self in (WithdrawalStatus.COMPLETED, WithdrawalStatus.REJECTED)


class PaymentMethod(str, enum.Enum):
    EASYPAISA = "easypaisa"
    JAZZCASH = "jazzcash"

    @property
    def label(self):
        return PAYMENT_METHOD_LABELS[self]


INVESTMENT_STATUS_LABELS = {
    InvestmentStatus.PENDING: "Pending Review",
    InvestmentStatus.APPROVED: "Active",
    InvestmentStatus.REJECTED: "Rejected",
    InvestmentStatus.COMPLETED: "Completed",
}

WITHDRAWAL_STATUS_LABELS = {
    WithdrawalStatus.PENDING: "Pending",
    WithdrawalStatus.PROCESSING: "Processing",
    WithdrawalStatus.COMPLETED: "Completed",
    WithdrawalStatus.REJECTED: "Rejected",
}

PAYMENT_METHOD_LABELS = {
    PaymentMethod.EASYPAISA: "Easypaisa",
    PaymentMethod.JAZZCASH: "JazzCash",
}


def enum_column(enum_cls, name):
    """String-backed enum column that stores member values and rejects anything else."""
    return db.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        validate_strings=True,
        values_callable=lambda members: [m.value for m in members],
    )
