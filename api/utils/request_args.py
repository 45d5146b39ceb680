from __future__ import annotations

from typing import Tuple

from flask import request, abort

MAX_LIMIT = 100
# Keeps (page - 1) * limit inside a 64-bit OFFSET
MAX_PAGE = 10**6


def parse_pagination(default_limit: int = 10) -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", str(default_limit)))
    except ValueError:
        abort(400, description="page and limit must be integers")
    if page > MAX_PAGE:
        abort(400, description=f"page must be at most {MAX_PAGE}")
    page = max(page, 1)
    limit = max(1, min(limit, MAX_LIMIT))
    return page, limit


def parse_sort(columns: dict, default_field: str, default_type: str = "desc"):
    """
    sortBy picks a column from the allowlist, sortType is "desc" for
    descending and anything else for ascending.
    """
    key = request.args.get("sortBy", default_field)
    col = columns.get(key)
    if col is None:
        allowed = ", ".join(sorted(columns))
        abort(400, description=f"Unsupported sort field: {key}. Allowed: {allowed}")
    desc = request.args.get("sortType", default_type).lower() == "desc"
    return col.desc() if desc else col.asc()
