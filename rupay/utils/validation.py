from marshmallow import EXCLUDE, ValidationError as SchemaValidationError

from rupay.utils.exceptions import ValidationError


def load_or_raise(schema, data):
    """Load ``data`` with a marshmallow schema, re-raising field errors as ValidationError."""
    try:
        return schema.load(data or {}, unknown=EXCLUDE)
    except SchemaValidationError as e:
        raise ValidationError("Missing or invalid fields", details=e.messages)
