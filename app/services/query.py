"""
Listing support: search, status and date-range filters plus pagination

Models declare what can be filtered through three class attributes:
`__searchable__` (text columns for ?search=), `__status_field__` (enum
column for ?status=) and `__date_field__` (column bounded by
?date_from= / ?date_to=).
"""
import math
from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy import or_

from app.errors import ValidationError
from app.utils.validators import require_datetime

NO_STATUS_FILTER = (None, '', 'all')


@dataclass
class ListParams:
    page: int = 1
    limit: Optional[int] = None
    search: Optional[str] = None
    status: Optional[str] = None
    date_from: Optional[object] = None
    date_to: Optional[object] = None

    @classmethod
    def from_args(cls, args):
        """Build from a query-string mapping such as request.args"""
        def as_int(key, default):
            raw = args.get(key)
            if raw in (None, ''):
                return default
            try:
                return int(raw)
            except (TypeError, ValueError):
                raise ValidationError(f'{key} must be an integer')

        def as_date(key):
            raw = args.get(key)
            return require_datetime(raw, key) if raw else None

        return cls(
            page=as_int('page', 1),
            limit=as_int('limit', None),
            search=args.get('search') or None,
            status=args.get('status') or None,
            date_from=as_date('date_from'),
            date_to=as_date('date_to'),
        )

    def resolved_limit(self):
        default = current_app.config['ITEMS_PER_PAGE']
        ceiling = current_app.config['MAX_ITEMS_PER_PAGE']
        limit = default if self.limit is None else self.limit
        if self.page is None or self.page < 1:
            raise ValidationError('page must be at least 1')
        if limit < 1:
            raise ValidationError('limit must be at least 1')
        return min(limit, ceiling)


@dataclass
class Page:
    items: list
    total: int
    page: int
    limit: int

    @property
    def pages(self):
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self, serialize=None):
        serialize = serialize or (lambda item: item.to_dict())
        return {
            'items': [serialize(item) for item in self.items],
            'pagination': {
                'page': self.page,
                'limit': self.limit,
                'total': self.total,
                'pages': self.pages,
            },
        }


def _escape_like(term):
    return term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def apply_filters(query, model, params):
    """Narrow `query` by the search, status and date filters in `params`"""
    if params.search and model.__searchable__:
        pattern = f'%{_escape_like(params.search.strip())}%'
        query = query.filter(or_(*[
            getattr(model, name).ilike(pattern, escape='\\')
            for name in model.__searchable__
        ]))

    if params.status not in NO_STATUS_FILTER and model.__status_field__:
        query = query.filter(getattr(model, model.__status_field__) == params.status)

    if params.date_from or params.date_to:
        if params.date_from and params.date_to and params.date_from > params.date_to:
            raise ValidationError('date_from cannot be after date_to')
        column = getattr(model, model.__date_field__)
        if params.date_from:
            query = query.filter(column >= params.date_from)
        if params.date_to:
            query = query.filter(column <= params.date_to)

    return query


def paginate(query, model, params=None, order_by=None):
    """
    Filter, count and slice a query, newest rows first

    Args:
        query: Base (already tenant-scoped) query
        model: Model class the query selects
        params (ListParams): Filters and paging
        order_by: Override of the default created_at DESC ordering

    Returns:
        Page: The requested slice and the total match count
    """
    params = params or ListParams()
    limit = params.resolved_limit()
    query = apply_filters(query, model, params)

    total = query.order_by(None).count()
    ordering = order_by if order_by is not None else model.created_at.desc()
    items = (
        query.order_by(ordering, model.id)
        .offset((params.page - 1) * limit)
        .limit(limit)
        .all()
    )
    return Page(items=items, total=total, page=params.page, limit=limit)
