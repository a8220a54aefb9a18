from typing import Tuple

from flask import request, abort

MAX_LIMIT = 100


def parse_pagination(default_limit: int = 20) -> Tuple[int, int]:
    """Read ?page=&limit= from the query string, clamped to sane bounds."""
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", str(default_limit)))
    except ValueError:
        abort(400, description="page and limit must be integers")
    page = max(page, 1)
    limit = max(1, min(limit, MAX_LIMIT))
    return page, limit


def paginate(query, order_by, page: int, limit: int):
    """Return (rows, meta) for a SQLAlchemy query."""
    total = query.count()
    rows = query.order_by(*order_by).offset((page - 1) * limit).limit(limit).all()
    return rows, {"page": page, "limit": limit, "total": total}
