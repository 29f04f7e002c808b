"""SOQL query composition.

Caller-supplied values are bound through simple-salesforce's ``format_soql``,
which quotes and escapes them. Dates and limits are validated here first and
only then inserted as literals. Field and object names are fixed by the
record store, never by callers.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Sequence

from simple_salesforce import format_soql

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SoqlError(ValueError):
    """Raised when a value cannot be used in a SOQL condition."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


def date_literal(value: Any) -> str:
    """Validate a YYYY-MM-DD value and return it as a SOQL date literal."""
    text = str(value).strip()
    if not _DATE_PATTERN.match(text):
        raise SoqlError("INVALID_DATE", f"Invalid date '{value}': expected YYYY-MM-DD format")
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        raise SoqlError("INVALID_DATE", f"Invalid date '{value}': not a calendar date")


def limit_literal(value: Any) -> int:
    """Coerce a limit to a positive integer."""
    if isinstance(value, bool):
        raise SoqlError("INVALID_LIMIT", f"Invalid limit '{value}': expected a positive integer")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise SoqlError("INVALID_LIMIT", f"Invalid limit '{value}': expected a positive integer")
    if not number.is_integer() or number < 1:
        raise SoqlError("INVALID_LIMIT", f"Invalid limit '{value}': expected a positive integer")
    return int(number)


@dataclass
class SoqlQuery:
    """A single-object SELECT with AND-ed conditions.

    Filter methods skip empty values, so optional parameters can be passed
    straight through.
    """

    sobject: str
    fields: Sequence[str]
    conditions: list[str] = field(default_factory=list)
    order_by: str | None = None
    limit: int | None = None

    def where_equals(self, field_name: str, value: Any) -> "SoqlQuery":
        if value:
            self.conditions.append(format_soql(f"{field_name} = {{}}", str(value)))
        return self

    def where_contains(self, field_name: str, value: Any) -> "SoqlQuery":
        if value:
            self.conditions.append(format_soql(f"{field_name} LIKE '%{{:like}}%'", str(value)))
        return self

    def where_on_or_after(self, field_name: str, value: Any) -> "SoqlQuery":
        if value:
            self.conditions.append(format_soql(f"{field_name} >= {{:literal}}", date_literal(value)))
        return self

    def where_on_or_before(self, field_name: str, value: Any) -> "SoqlQuery":
        if value:
            self.conditions.append(format_soql(f"{field_name} <= {{:literal}}", date_literal(value)))
        return self

    def where_between(self, field_name: str, start: Any, end: Any) -> "SoqlQuery":
        return self.where_on_or_after(field_name, start).where_on_or_before(field_name, end)

    def order(self, field_name: str, descending: bool = False) -> "SoqlQuery":
        self.order_by = f"{field_name} {'DESC' if descending else 'ASC'}"
        return self

    def take(self, value: Any, default: int | None = None) -> "SoqlQuery":
        if value is None:
            value = default
        if value is not None:
            self.limit = limit_literal(value)
        return self

    def to_soql(self) -> str:
        """Render the query text."""
        query = f"SELECT {', '.join(self.fields)} FROM {self.sobject}"
        if self.conditions:
            query += " WHERE " + " AND ".join(self.conditions)
        if self.order_by:
            query += f" ORDER BY {self.order_by}"
        if self.limit is not None:
            query += f" LIMIT {self.limit}"
        return query

    def __str__(self) -> str:
        return self.to_soql()
