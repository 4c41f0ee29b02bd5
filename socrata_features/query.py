"""
Query Formatter - FeatureServer query parameters to a SoQL query string.

    where             -> $where
    resultOffset      -> $offset
    resultRecordCount -> $limit
    orderByFields     -> $order   (default: ":id asc")

$select=:*,* is always sent so the system fields (:id, :created_at, ...)
come back alongside the data columns. Absent or empty parameters add no
clause; an absent offset is never turned into $offset=0.

Every value is URL-encoded here, so the returned string can be appended
to a URL as-is.
"""

import re
from typing import List, Tuple, Union, Dict, Any
from urllib.parse import quote_plus

from .exceptions import InvalidQueryError
from .models import QueryParameters, ID_FIELD

SELECT_ALL = ":*,*"
DEFAULT_ORDER = f"{ID_FIELD} asc"

# SoQL field names, including system fields such as :id
_FIELD_NAME = re.compile(r"^:?[A-Za-z_][A-Za-z0-9_]*$")
_DIRECTIONS = {"ASC": "ASC", "DESC": "DESC"}


def encode_value(value: str) -> str:
    """URL-encode one SoQL value (spaces become '+')."""
    return quote_plus(str(value), safe=":,*()")


def _clause(key: str, value: str) -> str:
    return f"{key}={encode_value(value)}"


def _non_negative_int(parameter: str, value: str) -> str:
    try:
        number = int(value)
    except ValueError:
        raise InvalidQueryError(parameter, value, "expected a non-negative integer") from None
    if number < 0:
        raise InvalidQueryError(parameter, value, "expected a non-negative integer")
    return str(number)


def parse_order_by(order_by_fields: str) -> List[Tuple[str, str]]:
    """
    Parse Esri orderByFields into (field, direction) pairs.

    Example: "name ASC, date DESC" -> [("name", "ASC"), ("date", "DESC")]

    Raises:
        InvalidQueryError: On an unknown direction or a malformed field name
    """
    result = []
    for item in order_by_fields.split(","):
        parts = item.split()
        if not parts:
            continue
        if len(parts) > 2:
            raise InvalidQueryError("orderByFields", order_by_fields, f"cannot parse '{item.strip()}'")

        field = parts[0]
        direction = parts[1].upper() if len(parts) == 2 else "ASC"

        if not _FIELD_NAME.match(field):
            raise InvalidQueryError("orderByFields", order_by_fields, f"invalid field name '{field}'")
        if direction not in _DIRECTIONS:
            raise InvalidQueryError("orderByFields", order_by_fields, f"invalid direction '{parts[1]}'")

        result.append((field, _DIRECTIONS[direction]))

    if not result:
        raise InvalidQueryError("orderByFields", order_by_fields, "no fields given")
    return result


def format_query(query: Union[QueryParameters, Dict[str, Any], None]) -> str:
    """
    Build the SoQL query string for a feature request.

    Args:
        query: Validated QueryParameters, or the raw query dict

    Returns:
        Ampersand-joined, URL-encoded query string

    Raises:
        InvalidQueryError: If offset/limit are not integers or ordering is malformed
    """
    if not isinstance(query, QueryParameters):
        query = QueryParameters(**(query or {}))

    qs = [_clause("$select", SELECT_ALL)]

    if query.where:
        qs.append(_clause("$where", query.where))
    if query.resultOffset:
        qs.append(_clause("$offset", _non_negative_int("resultOffset", query.resultOffset)))
    if query.resultRecordCount:
        qs.append(_clause("$limit", _non_negative_int("resultRecordCount", query.resultRecordCount)))

    if query.orderByFields:
        order = ",".join(f"{field} {direction}" for field, direction in parse_order_by(query.orderByFields))
        qs.append(_clause("$order", order))
    else:
        qs.append(_clause("$order", DEFAULT_ORDER))

    return "&".join(qs)


def extent_query(geometry_field: str) -> str:
    """Query string for the extent() aggregate over one geometry column."""
    return _clause("$select", f"extent({geometry_field})")
