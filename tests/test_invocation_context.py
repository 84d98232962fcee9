"""
Test suite for building the invocation context.
"""

import io
import json
import re
import unittest

from helpers import FakeClock

from mock_bootstrap import (
    Config,
    InvocationContext,
    InvocationInputError,
    LambdaContext,
    build_invocation
)


def make_context(clock=None, **overrides) -> InvocationContext:
    values = dict(
        request_id="req-1",
        function_name="orders",
        function_version="$LATEST",
        memory_limit_mb=128,
        timeout_seconds=3,
        region="eu-west-1",
        account_id="123456789012",
    )
    values.update(overrides)
    if clock is not None:
        values["clock"] = clock
    return InvocationContext(**values)


class TestBuildInvocation(unittest.TestCase):
    """Test argument and environment precedence."""

    def test_positional_arguments_win(self):
        config = Config(environ={
            "AWS_LAMBDA_FUNCTION_HANDLER": "env_mod::handler",
            "AWS_LAMBDA_CONTEXT": '{"from": "env"}',
        })

        request = build_invocation(["arg_mod::handler", '{"from": "args"}'], config)

        self.assertEqual(request.handler, "arg_mod::handler")
        self.assertEqual(request.context.body, b'{"from": "args"}')

    def test_environment_fallback(self):
        config = Config(environ={
            "AWS_LAMBDA_FUNCTION_HANDLER": "env_mod::handler",
            "AWS_LAMBDA_CONTEXT": '{"from": "env"}',
            "LAMBDA_TASK_ROOT": "/srv/task",
        })

        request = build_invocation([], config)

        self.assertEqual(request.handler, "env_mod::handler")
        self.assertEqual(request.context.body, b'{"from": "env"}')
        self.assertEqual(request.task_root, "/srv/task")

    def test_handler_argument_only(self):
        config = Config(environ={"AWS_LAMBDA_CONTEXT": '[1, 2]'})

        request = build_invocation(["arg_mod::handler"], config)

        self.assertEqual(request.handler, "arg_mod::handler")
        self.assertEqual(request.context.body, b"[1, 2]")

    def test_defaults_when_nothing_given(self):
        request = build_invocation([], Config(environ={}))

        self.assertEqual(request.handler, "")
        self.assertEqual(request.context.body, b"{}")
        self.assertEqual(request.task_root, "/var/task")

    def test_function_fields_from_config(self):
        config = Config(environ={
            "AWS_LAMBDA_FUNCTION_NAME": "orders",
            "AWS_LAMBDA_FUNCTION_VERSION": "12",
            "AWS_LAMBDA_FUNCTION_MEMORY_SIZE": "256",
            "AWS_LAMBDA_FUNCTION_TIMEOUT": "5",
            "AWS_REGION": "eu-central-1",
            "AWS_ACCOUNT_ID": "000000000000",
            "CUSTOM_VAR": "forwarded",
        })

        context = build_invocation([], config).context

        self.assertEqual(context.function_name, "orders")
        self.assertEqual(context.function_version, "12")
        self.assertEqual(context.memory_limit_mb, 256)
        self.assertEqual(context.timeout_seconds, 5)
        self.assertEqual(context.invoked_function_arn,
                         "arn:aws:lambda:eu-central-1:000000000000:function:orders")
        self.assertEqual(context.environment["CUSTOM_VAR"], "forwarded")

    def test_request_ids_are_unique(self):
        config = Config(environ={})
        ids = {build_invocation([], config).context.request_id for _ in range(20)}

        self.assertEqual(len(ids), 20)
        for request_id in ids:
            self.assertRegex(request_id, r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")

    def test_valid_json_bodies(self):
        config = Config(environ={})
        valid = ['{}', '{"key": "value"}', '[]', '"text"', '42', '3.5', 'null', 'true',
                 '{"nested": {"data": [1, 2, 3]}}', '  {"padded": 1}  ']

        for body in valid:
            with self.subTest(body=body):
                request = build_invocation(["mod::handler", body], config)
                self.assertEqual(json.loads(request.context.body), json.loads(body))

    def test_invalid_json_bodies(self):
        config = Config(environ={})
        invalid = ['', '{', '{"key": }', "{'single': 'quotes'}", 'undefined', '[1, 2,]']

        for body in invalid:
            with self.subTest(body=body):
                with self.assertRaises(InvocationInputError) as cm:
                    build_invocation(["mod::handler", body], config)
                self.assertIsInstance(cm.exception.__cause__, json.JSONDecodeError)

    def test_invalid_json_from_environment(self):
        config = Config(environ={"AWS_LAMBDA_CONTEXT": "not json"})

        with self.assertRaises(InvocationInputError):
            build_invocation([], config)

    def test_unicode_body_is_utf8(self):
        request = build_invocation(["mod::handler", '{"name": "Zoë"}'], Config(environ={}))
        self.assertEqual(request.context.body, '{"name": "Zoë"}'.encode("utf-8"))

    def test_body_that_is_not_utf8_encodable(self):
        with self.assertRaises(InvocationInputError) as cm:
            build_invocation(["mod::handler", '"\udcff"'], Config(environ={}))
        self.assertIsInstance(cm.exception.__cause__, UnicodeEncodeError)


class TestInvocationContext(unittest.TestCase):
    """Test timing and derived values."""

    def test_deadline_is_start_plus_timeout(self):
        clock = FakeClock(100.0)
        context = make_context(clock=clock, timeout_seconds=3)

        self.assertEqual(context.started_at, 100.0)
        self.assertEqual(context.deadline, 103.0)

        clock.advance(1.5)
        self.assertEqual(context.deadline, 103.0)

    def test_deadline_cannot_be_reassigned(self):
        context = make_context(clock=FakeClock())

        with self.assertRaises(AttributeError):
            context.deadline = 0.0

    def test_duration_and_remaining(self):
        clock = FakeClock(100.0)
        context = make_context(clock=clock, timeout_seconds=3)

        self.assertEqual(context.duration_ms(), 0)
        self.assertEqual(context.remaining_ms(), 3000)

        clock.advance(1.25)
        self.assertEqual(context.duration_ms(), 1250)
        self.assertEqual(context.remaining_ms(), 1750)

    def test_remaining_never_negative(self):
        clock = FakeClock(100.0)
        context = make_context(clock=clock, timeout_seconds=1)

        clock.advance(5)
        self.assertEqual(context.remaining_ms(), 0)
        self.assertEqual(context.duration_ms(), 5000)

    def test_streams(self):
        context = make_context(body=b'{"a": 1}')

        self.assertEqual(context.input_stream.read(), b'{"a": 1}')
        self.assertEqual(context.input_stream.read(), b'{"a": 1}')

        context.output.write(b"result")
        self.assertEqual(context.output_bytes, b"result")

    def test_arn(self):
        context = make_context()
        self.assertEqual(context.invoked_function_arn,
                         "arn:aws:lambda:eu-west-1:123456789012:function:orders")


class TestLambdaContext(unittest.TestCase):
    """Test the context object handlers receive."""

    def setUp(self):
        """Set up test fixtures."""
        self.clock = FakeClock(50.0)
        self.invocation = make_context(clock=self.clock, timeout_seconds=10)
        self.log_stream = io.StringIO()
        self.context = LambdaContext(self.invocation, log_stream=self.log_stream)

    def test_fields(self):
        self.assertEqual(self.context.aws_request_id, "req-1")
        self.assertEqual(self.context.function_name, "orders")
        self.assertEqual(self.context.function_version, "$LATEST")
        self.assertEqual(self.context.memory_limit_in_mb, 128)
        self.assertEqual(self.context.log_group_name, "/aws/lambda/orders")
        self.assertIsNone(self.context.client_context)
        self.assertTrue(re.match(r"^\d{4}/\d{2}/\d{2}/\[\$LATEST\][0-9a-f]{32}$",
                                 self.context.log_stream_name))

    def test_remaining_time_tracks_clock(self):
        self.assertEqual(self.context.get_remaining_time_in_millis(), 10000)
        self.clock.advance(2)
        self.assertEqual(self.context.get_remaining_time_in_millis(), 8000)

    def test_lazy_fields_are_cached(self):
        self.assertNotIn("invoked_function_arn", self.context.__dict__)

        arn = self.context.invoked_function_arn
        self.assertEqual(arn, "arn:aws:lambda:eu-west-1:123456789012:function:orders")
        self.assertIn("invoked_function_arn", self.context.__dict__)

        identity = self.context.identity
        self.assertIs(self.context.identity, identity)
        self.assertIsNone(identity.cognito_identity_id)
        self.assertIsNone(identity.cognito_identity_pool_id)

    def test_log_writes_lines(self):
        self.context.log("first")
        self.context.log("second\n")

        self.assertEqual(self.log_stream.getvalue(), "first\nsecond\n")


if __name__ == "__main__":
    unittest.main(verbosity=2)
