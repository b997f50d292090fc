"""Render domain predicates and sort keys as SQLAlchemy expressions.

Mirrors Predicate.matches() exactly:
  - negated single-field tests also accept NULL on nullable columns
  - day ranges on TIMESTAMP columns become half-open UTC intervals
    [start 00:00, end+1 00:00), on DATE columns plain inclusive bounds
"""
from sqlalchemy import Column, ColumnElement, and_, false, not_, or_, true
from sqlalchemy.sql.elements import UnaryExpression

from src.om_common.datetime_utils import start_of_day, start_of_next_day
from src.om_order.domain.fields import FieldKind, OrderField, SortKey
from src.om_order.domain.filters import (
    AllOf,
    AnyOf,
    Contains,
    DayRange,
    Equals,
    FieldPredicate,
    IsEmpty,
    MatchAll,
    NumberRange,
    OneOf,
    Predicate,
)
from src.om_order.infrastructure.db_models import OrderORM

orders_table = OrderORM.__table__


def column_for(field: OrderField) -> Column:
    return orders_table.c[field.name]


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _field_clause(pred: FieldPredicate, col: Column) -> ColumnElement[bool]:
    if isinstance(pred, Contains):
        return col.ilike(f"%{_escape_like(pred.needle)}%", escape="\\")
    if isinstance(pred, Equals):
        return col == pred.value
    if isinstance(pred, OneOf):
        return col.in_(pred.values)
    if isinstance(pred, NumberRange):
        bounds = []
        if pred.low is not None:
            bounds.append(col >= pred.low if pred.low_inclusive else col > pred.low)
        if pred.high is not None:
            bounds.append(col <= pred.high if pred.high_inclusive else col < pred.high)
        return and_(true(), *bounds)
    if isinstance(pred, DayRange):
        bounds = []
        if pred.field.kind is FieldKind.TIMESTAMP:
            if pred.start is not None:
                bounds.append(col >= start_of_day(pred.start))
            if pred.end is not None:
                bounds.append(col < start_of_next_day(pred.end))
        else:
            if pred.start is not None:
                bounds.append(col >= pred.start)
            if pred.end is not None:
                bounds.append(col <= pred.end)
        return and_(true(), *bounds)
    raise TypeError(f"Unsupported predicate: {type(pred).__name__}")


def _empty_clause(pred: IsEmpty, col: Column) -> ColumnElement[bool]:
    if pred.field.kind is FieldKind.TEXT:
        empty = or_(col.is_(None), col == "")
        filled = and_(col.is_not(None), col != "")
    else:
        empty = col.is_(None)
        filled = col.is_not(None)
    return filled if pred.negated else empty


def render_predicate(pred: Predicate) -> ColumnElement[bool]:
    if isinstance(pred, MatchAll):
        return true()
    if isinstance(pred, AllOf):
        return and_(*(render_predicate(p) for p in pred.parts))
    if isinstance(pred, AnyOf):
        if not pred.parts:
            return false()
        return or_(*(render_predicate(p) for p in pred.parts))
    if isinstance(pred, IsEmpty):
        return _empty_clause(pred, column_for(pred.field))
    if isinstance(pred, FieldPredicate):
        col = column_for(pred.field)
        clause = _field_clause(pred, col)
        if not pred.negated:
            return clause
        if pred.field.nullable:
            return or_(col.is_(None), not_(clause))
        return not_(clause)
    raise TypeError(f"Unsupported predicate: {type(pred).__name__}")


def render_sort(keys: tuple[SortKey, ...]) -> list[UnaryExpression]:
    """ORDER BY clauses; serial ascending breaks ties in insertion order."""
    clauses = [
        column_for(k.field).desc() if k.descending else column_for(k.field).asc()
        for k in keys
    ]
    if not any(k.field.name == "sn" for k in keys):
        clauses.append(orders_table.c.sn.asc())
    return clauses
