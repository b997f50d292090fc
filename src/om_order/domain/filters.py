"""Filter predicate compiler.

A filter specification is a list of clauses `{field, operator, value, variant}`
plus a join operator. `compile_filters` validates every clause against the
field registry and turns the list into one immutable Predicate tree:

    clauses ──compile_clause──▶ leaf predicates ──AND/OR──▶ Predicate

Predicates evaluate in-process via `matches(order)`; the SQL repository renders
the same tree into a WHERE clause (see infrastructure/sql_filters.py), so both
paths agree on semantics:

  - text         case-insensitive substring
  - multi-select membership; an EMPTY set means "no constraint"
  - ranges       inclusive, either bound optional
  - dates        inclusive, compared per UTC calendar day
  - negations    (notILike, ne, notInArray) are satisfied by NULL values

Clauses that carry no constraint (blank text, empty set, open range) are
dropped before joining; if nothing is left the result is MatchAll.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any

from src.om_common.datetime_utils import to_utc_date
from src.om_common.enums import FilterOperator, FilterVariant, JoinOperator
from src.om_common.errors import InvalidFilterError
from src.om_order.domain.fields import FieldKind, OrderField, get_field
from src.om_order.domain.models import Order

# ---------------------------------------------------------------------------
# Predicate tree
# ---------------------------------------------------------------------------


class Predicate:
    def matches(self, order: Order) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class MatchAll(Predicate):
    def matches(self, order: Order) -> bool:
        return True


@dataclass(frozen=True)
class AllOf(Predicate):
    parts: tuple[Predicate, ...]

    def matches(self, order: Order) -> bool:
        return all(p.matches(order) for p in self.parts)


@dataclass(frozen=True)
class AnyOf(Predicate):
    parts: tuple[Predicate, ...]

    def matches(self, order: Order) -> bool:
        return any(p.matches(order) for p in self.parts)


class FieldPredicate(Predicate):
    """Single-field test. NULL never satisfies the test, so it satisfies its negation."""

    field: OrderField
    negated: bool

    def matches(self, order: Order) -> bool:
        value = self.field.value_of(order)
        if value is None:
            return self.negated
        return self.test(value) != self.negated

    def test(self, value: Any) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Contains(FieldPredicate):
    field: OrderField
    needle: str
    negated: bool = False

    def test(self, value: Any) -> bool:
        return self.needle.lower() in str(value).lower()


@dataclass(frozen=True)
class Equals(FieldPredicate):
    field: OrderField
    value: str
    negated: bool = False

    def test(self, value: Any) -> bool:
        return value == self.value


@dataclass(frozen=True)
class OneOf(FieldPredicate):
    field: OrderField
    values: tuple[str, ...]
    negated: bool = False

    def test(self, value: Any) -> bool:
        return value in self.values


@dataclass(frozen=True)
class NumberRange(FieldPredicate):
    field: OrderField
    low: Decimal | None = None
    high: Decimal | None = None
    low_inclusive: bool = True
    high_inclusive: bool = True
    negated: bool = False

    def test(self, value: Any) -> bool:
        if self.low is not None:
            if value < self.low or (value == self.low and not self.low_inclusive):
                return False
        if self.high is not None:
            if value > self.high or (value == self.high and not self.high_inclusive):
                return False
        return True


@dataclass(frozen=True)
class DayRange(FieldPredicate):
    """Inclusive [start, end] on the UTC calendar day of a date/timestamp field."""

    field: OrderField
    start: date | None = None
    end: date | None = None
    negated: bool = False

    def test(self, value: Any) -> bool:
        day = to_utc_date(value) if isinstance(value, datetime) else value
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


@dataclass(frozen=True)
class IsEmpty(FieldPredicate):
    field: OrderField
    negated: bool = False

    def matches(self, order: Order) -> bool:
        value = self.field.value_of(order)
        empty = value is None or value == ""
        return empty != self.negated


# ---------------------------------------------------------------------------
# Clause input
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilterClause:
    field: str
    operator: FilterOperator | str
    value: Any
    variant: FilterVariant | str


@dataclass(frozen=True)
class BasicFilters:
    """The fixed filter bar: substring boxes, multi-selects and two ranges."""

    part_number: str = ""
    customer: str = ""
    supplier: str = ""
    supplier_po: str = ""
    cust_po: str = ""
    status: tuple[str, ...] = ()
    term: tuple[str, ...] = ()
    currency: tuple[str, ...] = ()
    payment_received: tuple[str, ...] = ()
    po_value: tuple[Any, ...] = ()
    po_date: tuple[Any, ...] = ()


_VARIANT_KINDS: dict[FilterVariant, frozenset[FieldKind]] = {
    FilterVariant.TEXT: frozenset({FieldKind.TEXT, FieldKind.CHOICE}),
    FilterVariant.NUMBER: frozenset({FieldKind.NUMBER}),
    FilterVariant.RANGE: frozenset({FieldKind.NUMBER}),
    FilterVariant.DATE: frozenset({FieldKind.DATE, FieldKind.TIMESTAMP}),
    FilterVariant.DATE_RANGE: frozenset({FieldKind.DATE, FieldKind.TIMESTAMP}),
    FilterVariant.SELECT: frozenset({FieldKind.CHOICE, FieldKind.TEXT}),
    FilterVariant.MULTI_SELECT: frozenset({FieldKind.CHOICE, FieldKind.TEXT}),
    FilterVariant.BOOLEAN: frozenset({FieldKind.CHOICE}),
}

_EMPTINESS = frozenset({FilterOperator.IS_EMPTY, FilterOperator.IS_NOT_EMPTY})
_ORDERING = frozenset({
    FilterOperator.EQ, FilterOperator.NE, FilterOperator.LT,
    FilterOperator.LTE, FilterOperator.GT, FilterOperator.GTE,
})

_VARIANT_OPERATORS: dict[FilterVariant, frozenset[FilterOperator]] = {
    FilterVariant.TEXT: frozenset({
        FilterOperator.ILIKE, FilterOperator.NOT_ILIKE,
        FilterOperator.EQ, FilterOperator.NE,
    }) | _EMPTINESS,
    FilterVariant.NUMBER: _ORDERING | {FilterOperator.IS_BETWEEN} | _EMPTINESS,
    FilterVariant.RANGE: frozenset({FilterOperator.IS_BETWEEN}) | _EMPTINESS,
    FilterVariant.DATE: _ORDERING | {FilterOperator.IS_BETWEEN} | _EMPTINESS,
    FilterVariant.DATE_RANGE: frozenset({FilterOperator.IS_BETWEEN}) | _EMPTINESS,
    FilterVariant.SELECT: frozenset({
        FilterOperator.EQ, FilterOperator.NE,
        FilterOperator.IN_ARRAY, FilterOperator.NOT_IN_ARRAY,
    }) | _EMPTINESS,
    FilterVariant.MULTI_SELECT: frozenset({
        FilterOperator.IN_ARRAY, FilterOperator.NOT_IN_ARRAY,
    }) | _EMPTINESS,
    FilterVariant.BOOLEAN: frozenset({FilterOperator.EQ, FilterOperator.NE}),
}

_YES_NO = ("Yes", "No")

# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_text(value: Any, fld: OrderField) -> str | None:
    if _is_blank(value):
        return None
    if not isinstance(value, str):
        raise InvalidFilterError(f"'{fld.name}' expects text, got {value!r}")
    return value


def _parse_number(value: Any, fld: OrderField) -> Decimal | None:
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise InvalidFilterError(f"'{fld.name}' expects a number, got {value!r}")
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise InvalidFilterError(f"'{fld.name}' expects a number, got {value!r}") from None
    if not number.is_finite():
        raise InvalidFilterError(f"'{fld.name}' expects a finite number")
    return number


def _parse_day(value: Any, fld: OrderField) -> date | None:
    if _is_blank(value):
        return None
    try:
        return to_utc_date(value)
    except (ValueError, OverflowError, OSError):
        raise InvalidFilterError(f"'{fld.name}' expects a date, got {value!r}") from None


def _parse_pair(value: Any, fld: OrderField) -> tuple[Any, Any]:
    if value is None:
        return None, None
    if not isinstance(value, (list, tuple)) or len(value) > 2:
        raise InvalidFilterError(f"'{fld.name}' expects a [from, to] pair")
    low = value[0] if len(value) > 0 else None
    high = value[1] if len(value) > 1 else None
    return low, high


def _parse_choices(value: Any, fld: OrderField) -> tuple[str, ...]:
    if value is None:
        return ()
    items = [value] if isinstance(value, str) else value
    if not isinstance(items, (list, tuple)):
        raise InvalidFilterError(f"'{fld.name}' expects a list of options")
    picked: list[str] = []
    for item in items:
        if not isinstance(item, str):
            raise InvalidFilterError(f"'{fld.name}' options must be text, got {item!r}")
        if fld.choices and item not in fld.choices:
            raise InvalidFilterError(f"'{item}' is not a valid option for '{fld.name}'")
        picked.append(item)
    return tuple(dict.fromkeys(picked))


def _parse_yes_no(value: Any, fld: OrderField) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes"):
            return "Yes"
        if lowered in ("false", "no"):
            return "No"
    raise InvalidFilterError(f"'{fld.name}' expects true/false, got {value!r}")


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def _coerce_enum(enum_cls: type, raw: Any, what: str) -> Any:
    try:
        return enum_cls(raw)
    except ValueError:
        raise InvalidFilterError(f"unknown {what} '{raw}'") from None


def _number_predicate(
    fld: OrderField, op: FilterOperator, value: Any
) -> Predicate | None:
    if op is FilterOperator.IS_BETWEEN:
        low_raw, high_raw = _parse_pair(value, fld)
        low, high = _parse_number(low_raw, fld), _parse_number(high_raw, fld)
        if low is None and high is None:
            return None
        return NumberRange(fld, low=low, high=high)
    number = _parse_number(value, fld)
    if number is None:
        return None
    if op is FilterOperator.EQ:
        return NumberRange(fld, low=number, high=number)
    if op is FilterOperator.NE:
        return NumberRange(fld, low=number, high=number, negated=True)
    if op is FilterOperator.LT:
        return NumberRange(fld, high=number, high_inclusive=False)
    if op is FilterOperator.LTE:
        return NumberRange(fld, high=number)
    if op is FilterOperator.GT:
        return NumberRange(fld, low=number, low_inclusive=False)
    return NumberRange(fld, low=number)  # GTE


def _date_predicate(
    fld: OrderField, op: FilterOperator, value: Any
) -> Predicate | None:
    if op is FilterOperator.IS_BETWEEN:
        start_raw, end_raw = _parse_pair(value, fld)
        start, end = _parse_day(start_raw, fld), _parse_day(end_raw, fld)
        if start is None and end is None:
            return None
        return DayRange(fld, start=start, end=end)
    day = _parse_day(value, fld)
    if day is None:
        return None
    one_day = timedelta(days=1)
    if op is FilterOperator.EQ:
        return DayRange(fld, start=day, end=day)
    if op is FilterOperator.NE:
        return DayRange(fld, start=day, end=day, negated=True)
    if op is FilterOperator.LT:
        return DayRange(fld, end=day - one_day)
    if op is FilterOperator.LTE:
        return DayRange(fld, end=day)
    if op is FilterOperator.GT:
        return DayRange(fld, start=day + one_day)
    return DayRange(fld, start=day)  # GTE


def compile_clause(clause: FilterClause) -> Predicate | None:
    """Compile one clause; None means the clause carries no constraint."""
    fld = get_field(clause.field)
    variant = _coerce_enum(FilterVariant, clause.variant, "variant")
    op = _coerce_enum(FilterOperator, clause.operator, "operator")

    if fld.kind not in _VARIANT_KINDS[variant]:
        raise InvalidFilterError(
            f"variant '{variant.value}' does not apply to field '{fld.name}'"
        )
    if variant is FilterVariant.BOOLEAN and fld.choices != _YES_NO:
        raise InvalidFilterError(f"field '{fld.name}' is not a yes/no field")
    if op not in _VARIANT_OPERATORS[variant]:
        raise InvalidFilterError(
            f"operator '{op.value}' is not supported for variant '{variant.value}'"
        )

    if op in _EMPTINESS:
        return IsEmpty(fld, negated=op is FilterOperator.IS_NOT_EMPTY)

    if variant is FilterVariant.TEXT:
        text = _parse_text(clause.value, fld)
        if text is None:
            return None
        if op in (FilterOperator.ILIKE, FilterOperator.NOT_ILIKE):
            return Contains(fld, text, negated=op is FilterOperator.NOT_ILIKE)
        return Equals(fld, text, negated=op is FilterOperator.NE)

    if variant in (FilterVariant.NUMBER, FilterVariant.RANGE):
        return _number_predicate(fld, op, clause.value)

    if variant in (FilterVariant.DATE, FilterVariant.DATE_RANGE):
        return _date_predicate(fld, op, clause.value)

    if variant is FilterVariant.BOOLEAN:
        return Equals(fld, _parse_yes_no(clause.value, fld), negated=op is FilterOperator.NE)

    # select / multiSelect
    options = _parse_choices(clause.value, fld)
    if not options:
        return None
    if op in (FilterOperator.EQ, FilterOperator.NE):
        if len(options) != 1:
            raise InvalidFilterError(f"'{fld.name}' expects a single option for '{op.value}'")
        return Equals(fld, options[0], negated=op is FilterOperator.NE)
    return OneOf(fld, options, negated=op is FilterOperator.NOT_IN_ARRAY)


def join(parts: list[Predicate], join_operator: JoinOperator | str) -> Predicate:
    operator = _coerce_enum(JoinOperator, join_operator, "join operator")
    if not parts:
        return MatchAll()
    if len(parts) == 1:
        return parts[0]
    if operator is JoinOperator.OR:
        return AnyOf(tuple(parts))
    return AllOf(tuple(parts))


def compile_filters(
    clauses: list[FilterClause], join_operator: JoinOperator | str = JoinOperator.AND
) -> Predicate:
    """Compile an advanced filter specification.

    Every clause is validated even if another one fails to constrain, so a bad
    clause always rejects the request.
    """
    parts = [p for p in (compile_clause(c) for c in clauses) if p is not None]
    return join(parts, join_operator)


def basic_clauses(basic: BasicFilters) -> list[FilterClause]:
    """Express the fixed filter bar as ordinary clauses (joined with AND)."""
    text = FilterVariant.TEXT
    multi = FilterVariant.MULTI_SELECT
    clauses = [
        FilterClause("part_number", FilterOperator.ILIKE, basic.part_number, text),
        FilterClause("customer", FilterOperator.ILIKE, basic.customer, text),
        FilterClause("supplier", FilterOperator.ILIKE, basic.supplier, text),
        FilterClause("supplier_po", FilterOperator.ILIKE, basic.supplier_po, text),
        FilterClause("cust_po", FilterOperator.ILIKE, basic.cust_po, text),
        FilterClause("status", FilterOperator.IN_ARRAY, list(basic.status), multi),
        FilterClause("term", FilterOperator.IN_ARRAY, list(basic.term), multi),
        FilterClause("currency", FilterOperator.IN_ARRAY, list(basic.currency), multi),
        FilterClause(
            "payment_received", FilterOperator.IN_ARRAY, list(basic.payment_received), multi
        ),
    ]
    if basic.po_value:
        clauses.append(FilterClause(
            "po_value", FilterOperator.IS_BETWEEN, list(basic.po_value), FilterVariant.RANGE
        ))
    if basic.po_date:
        clauses.append(FilterClause(
            "po_date", FilterOperator.IS_BETWEEN, list(basic.po_date), FilterVariant.DATE_RANGE
        ))
    return clauses


def compile_basic(basic: BasicFilters) -> Predicate:
    return compile_filters(basic_clauses(basic), JoinOperator.AND)
