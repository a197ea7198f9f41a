from rupay.utils.exceptions import ValidationError

MAX_PAGE_SIZE = 100


def _positive_int(value, default, name):
    if value in (None, ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{name}' must be a whole number", details={name: value})
    return max(number, 1)


def paginate_query(query, page, limit):
    page = _positive_int(page, 1, "page")
    limit = min(_positive_int(limit, 20, "limit"), MAX_PAGE_SIZE)

    items = query.offset((page - 1) * limit).limit(limit).all()
    total = query.order_by(None).count()
    return items, {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": (total + limit - 1) // limit,
    }
