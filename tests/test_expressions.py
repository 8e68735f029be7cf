#tests\test_expressions.py

"""Test value references, expressions and connection string parsing."""

import asyncio

import pytest

from clickhouse_hosting.core.connection_string import (
    ReferenceExpressionBuilder,
    parse_connection_string,
    split_connection_string,
)
from clickhouse_hosting.core.errors import ResourceValidationError, UnresolvedReferenceError
from clickhouse_hosting.core.expressions import (
    AllocatedEndpoint,
    EndpointProperty,
    EndpointReference,
    LiteralRef,
    ParameterRef,
    ReferenceExpression,
)
from clickhouse_hosting.domain.models import ParameterResource


class TestValueRefs:
    """Test individual references."""

    def test_literal(self, context):
        ref = LiteralRef("default")

        assert ref.value_expression == "default"
        assert ref.resolve(context) == "default"

    def test_parameter_template(self):
        ref = ParameterRef(ParameterResource("ch1-password", value="x"))

        assert ref.value_expression == "{ch1-password.value}"

    def test_parameter_uses_configured_value_first(self, context):
        parameter = ParameterResource("password", value="literal")
        context.set_parameter_value("password", "configured")

        assert ParameterRef(parameter).resolve(context) == "configured"

    def test_parameter_without_value_fails(self, context):
        ref = ParameterRef(ParameterResource("password"))

        with pytest.raises(UnresolvedReferenceError):
            ref.resolve(context)

    def test_generated_parameter_value_is_stable(self, context):
        calls = []

        def generate():
            calls.append(1)
            return f"generated-{len(calls)}"

        ref = ParameterRef(ParameterResource("password", default=generate))

        assert ref.resolve(context) == "generated-1"
        assert ref.resolve(context) == "generated-1"
        assert len(calls) == 1

    def test_endpoint_templates(self):
        endpoint = EndpointReference("ch1", "http")

        assert endpoint.host.value_expression == "{ch1.bindings.http.host}"
        assert endpoint.port.value_expression == "{ch1.bindings.http.port}"
        assert endpoint.url.value_expression == "{ch1.bindings.http.url}"
        assert (
            endpoint.get_property(EndpointProperty.TARGET_PORT).value_expression
            == "{ch1.bindings.http.targetPort}"
        )

    def test_endpoint_before_allocation_fails(self, context):
        ref = EndpointReference("ch1", "http").host

        with pytest.raises(UnresolvedReferenceError):
            ref.resolve(context)

    def test_endpoint_reflects_current_allocation(self, context, allocate):
        """Refs never cache: each resolve sees the current allocation."""
        endpoint = EndpointReference("ch1", "http")
        assert not endpoint.is_allocated(context)

        allocate(context, "ch1", host="localhost", port=8123)
        assert endpoint.port.resolve(context) == "8123"

        allocate(context, "ch1", host="10.0.0.5", port=9000)
        assert endpoint.host.resolve(context) == "10.0.0.5"
        assert endpoint.port.resolve(context) == "9000"

    def test_endpoint_properties(self, context):
        endpoint = EndpointReference("ch1", "http")
        context.allocate_endpoint(
            "ch1", "http", AllocatedEndpoint("localhost", 18123, scheme="http", target_port=8123)
        )

        assert endpoint.url.resolve(context) == "http://localhost:18123"
        assert endpoint.get_property(EndpointProperty.SCHEME).resolve(context) == "http"
        assert endpoint.get_property(EndpointProperty.TARGET_PORT).resolve(context) == "8123"
        assert endpoint.get_property(EndpointProperty.HOST_AND_PORT).resolve(context) == "localhost:18123"

    @pytest.mark.asyncio
    async def test_endpoint_resolve_async_waits_for_allocation(self, context, allocate):
        ref = EndpointReference("ch1", "http").host

        pending = asyncio.create_task(ref.resolve_async(context))
        await asyncio.sleep(0)
        assert not pending.done()

        allocate(context, "ch1", host="db.local")

        assert await asyncio.wait_for(pending, timeout=1) == "db.local"


class TestReferenceExpression:
    """Test expressions and the builder."""

    def test_builder_keeps_segment_order(self, context, allocate):
        endpoint = EndpointReference("ch1", "http")
        expression = (
            ReferenceExpressionBuilder()
            .append_literal("Host=")
            .append_expression(endpoint.host)
            .append_literal(";Port=")
            .append_expression(endpoint.port)
            .build()
        )
        allocate(context, "ch1", host="localhost", port=8123)

        assert expression.value_expression == "Host={ch1.bindings.http.host};Port={ch1.bindings.http.port}"
        assert expression.get_value(context) == "Host=localhost;Port=8123"

    def test_literal_is_not_escaped(self, context):
        expression = ReferenceExpressionBuilder().append_literal("a={b};c").build()

        assert expression.value_expression == "a={b};c"
        assert expression.get_value(context) == "a={b};c"

    def test_append_expression_rejects_strings(self):
        with pytest.raises(TypeError):
            ReferenceExpressionBuilder().append_expression("Host=")

    def test_build_freezes_segments(self):
        builder = ReferenceExpressionBuilder().append_literal("a")
        expression = builder.build()
        builder.append_literal("b")

        assert expression.value_expression == "a"

    def test_nested_expressions(self, context):
        inner = ReferenceExpression.create("user=", LiteralRef("default"))
        outer = ReferenceExpression.create("[", inner, "]")

        assert outer.value_expression == "[user=default]"
        assert outer.get_value(context) == "[user=default]"
        assert list(outer.iter_references()) == [LiteralRef("default")]

    def test_empty_expression_has_no_value(self, context):
        assert ReferenceExpression().get_value(context) is None

    def test_missing_reference_fails_whole_expression(self, context):
        expression = ReferenceExpression.create("Host=", EndpointReference("ch1", "http").host)

        with pytest.raises(UnresolvedReferenceError):
            expression.get_value(context)


class TestConnectionStringParsing:
    """Test parsing resolved connection strings."""

    def test_parse_full(self):
        info = parse_connection_string(
            "Host=localhost;Port=8123;Username=default;Password=p@ss=1;Database=customers"
        )

        assert info.host == "localhost"
        assert info.port == 8123
        assert info.username == "default"
        assert info.password == "p@ss=1"
        assert info.database == "customers"
        assert info.base_url == "http://localhost:8123"

    def test_parse_defaults(self):
        info = parse_connection_string("host=localhost;port=8123")

        assert info.username == "default"
        assert info.password is None
        assert info.database is None

    def test_keys_are_case_insensitive_and_quotes_removed(self):
        assert split_connection_string("HOST=a; Port = 1") == {"host": "a", "port": "1"}
        assert split_connection_string('Password="secret"') == {"password": "secret"}

    def test_missing_port_fails(self):
        with pytest.raises(ResourceValidationError):
            parse_connection_string("Host=localhost")

    def test_segment_without_equals_fails(self):
        with pytest.raises(ResourceValidationError):
            parse_connection_string("Host=localhost;Port")
