# clickhouse_hosting/core/connection_string.py
"""Connection string composition and parsing."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from clickhouse_hosting.core.errors import ResourceValidationError
from clickhouse_hosting.core.expressions import ReferenceExpression, Segment, ValueRef


DEFAULT_USERNAME = "default"


class ReferenceExpressionBuilder:
    """Accumulates segments; build() freezes them into a ReferenceExpression."""

    def __init__(self):
        self._segments: List[Segment] = []

    def append_literal(self, text: str) -> "ReferenceExpressionBuilder":
        """Append text verbatim. No escaping is applied."""
        self._segments.append(text)
        return self

    def append_expression(self, value: ValueRef) -> "ReferenceExpressionBuilder":
        if not isinstance(value, ValueRef):
            raise TypeError(f"Expected a ValueRef, got {type(value).__name__}")
        self._segments.append(value)
        return self

    def append(self, *parts: Segment) -> "ReferenceExpressionBuilder":
        for part in parts:
            if isinstance(part, str):
                self.append_literal(part)
            else:
                self.append_expression(part)
        return self

    def build(self) -> ReferenceExpression:
        return ReferenceExpression(tuple(self._segments))


# ============================================
# PARSING
# ============================================

class ClickHouseConnectionInfo(BaseModel):
    """Resolved connection string, split into its fields."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)
    username: str = DEFAULT_USERNAME
    password: Optional[str] = None
    database: Optional[str] = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


def split_connection_string(connection_string: str) -> Dict[str, str]:
    """
    Split "Key=Value;Key=Value" into a dict keyed by lower-cased key.

    Values keep everything after the first "=", so they may contain "=".
    A value wrapped in double quotes is unwrapped. Later keys win.
    """
    pairs: Dict[str, str] = {}

    for part in connection_string.split(";"):
        if not part.strip():
            continue

        key, sep, value = part.partition("=")
        if not sep:
            raise ResourceValidationError(
                "connection_string",
                f"segment '{key.strip()}' is not a Key=Value pair"
            )

        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]

        pairs[key.strip().lower()] = value

    return pairs


def parse_connection_string(connection_string: str) -> ClickHouseConnectionInfo:
    pairs = split_connection_string(connection_string)

    try:
        return ClickHouseConnectionInfo(
            host=pairs.get("host", ""),
            port=pairs.get("port", 0),
            username=pairs.get("username", DEFAULT_USERNAME),
            password=pairs.get("password"),
            database=pairs.get("database"),
        )
    except ValidationError as e:
        raise ResourceValidationError("connection_string", str(e)) from e
