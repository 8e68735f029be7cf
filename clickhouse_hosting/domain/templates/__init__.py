"""Container templates."""

from .clickhouse import CLICKHOUSE_TEMPLATE, PASSWORD_ENV_VAR, USER_ENV_VAR


__all__ = ["CLICKHOUSE_TEMPLATE", "USER_ENV_VAR", "PASSWORD_ENV_VAR"]
