"""Document-style access to the `investments`, `withdrawals` and `users` tables.

The lifecycle services only talk to the database through this adapter, so a
store outage surfaces as a single error type and nothing retries behind the
caller's back.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from rupay.extensions import db
from rupay.models.investment import Investment
from rupay.models.user import User
from rupay.models.withdrawal_request import WithdrawalRequest
from rupay.utils.exceptions import NotFoundError, StoreUnavailableError, ValidationError

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "investments": Investment,
    "withdrawals": WithdrawalRequest,
    "users": User,
}

_OPERATORS = {
    "==": lambda col, v: col == v,
    "!=": lambda col, v: col != v,
    "<": lambda col, v: col < v,
    "<=": lambda col, v: col <= v,
    ">": lambda col, v: col > v,
    ">=": lambda col, v: col >= v,
    "in": lambda col, v: col.in_(list(v)),
}


class DocumentStore:
    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session or db.session

    def _model(self, collection):
        model = COLLECTIONS.get(collection)
        if model is None:
            raise ValidationError(f"Unknown collection '{collection}'", code="UNKNOWN_COLLECTION")
        return model

    def _column(self, model, field):
        column = getattr(model, field, None)
        if column is None or field not in model.__table__.columns:
            raise ValidationError(
                f"Unknown field '{field}' on {model.__tablename__}",
                code="UNKNOWN_FIELD",
            )
        return column

    def _failed(self, action, collection, exc):
        self.session.rollback()
        logger.error("Store %s on %s failed: %s", action, collection, exc)
        return StoreUnavailableError(details={"collection": collection, "action": action})

    def query(self, collection, filters=None, ordering=None, limit=None):
        model = self._model(collection)
        q = self.session.query(model)

        for field, op, value in filters or ():
            if op not in _OPERATORS:
                raise ValidationError(f"Unsupported filter operator '{op}'", code="UNKNOWN_OPERATOR")
            q = q.filter(_OPERATORS[op](self._column(model, field), value))

        for field, direction in ordering or ():
            column = self._column(model, field)
            q = q.order_by(column.desc() if direction == "desc" else column.asc())

        if limit is not None:
            q = q.limit(limit)

        try:
            return q.all()
        except SQLAlchemyError as e:
            raise self._failed("query", collection, e)

    def get(self, collection, record_id, for_update=False):
        model = self._model(collection)
        q = self.session.query(model).filter(model.id == record_id)
        if for_update:
            q = q.with_for_update()

        try:
            record = q.one_or_none()
        except SQLAlchemyError as e:
            raise self._failed("get", collection, e)

        if record is None:
            raise NotFoundError(
                f"{collection[:-1].capitalize()} not found",
                details={"collection": collection, "id": record_id},
            )
        return record

    def create(self, collection, data):
        model = self._model(collection)
        for field in data:
            self._column(model, field)

        record = model(**data)
        try:
            self.session.add(record)
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._failed("create", collection, e)
        return record.id

    def update(self, collection, record_id, partial):
        model = self._model(collection)
        for field in partial:
            self._column(model, field)

        record = self.get(collection, record_id)
        for field, value in partial.items():
            setattr(record, field, value)

        try:
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._failed("update", collection, e)
