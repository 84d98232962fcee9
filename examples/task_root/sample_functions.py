"""
Example handlers for running with the bootstrap.

Point LAMBDA_TASK_ROOT at this directory, then for example:

    mock-bootstrap sample_functions::hello '{"name": "Ada"}'
    mock-bootstrap sample_functions::Statistics::handle '{"numbers": [1, 2, 3]}'
    mock-bootstrap sample_functions::Greeter '{"name": "Ada"}'
"""

import logging
import time
from typing import Any, Dict

from mock_bootstrap import LambdaFunction

import sample_stats


logger = logging.getLogger(__name__)


def hello(event: Any, context: Any) -> str:
    """Return a personalized greeting."""
    name = event.get("name", "World") if isinstance(event, dict) else "World"
    context.log(f"greeting {name}")
    return f"Hello, {name}!"


def echo_context(event: Any, context: Any) -> Dict[str, Any]:
    """Return what the handler can see of its context."""
    return {
        "event": event,
        "request_id": context.aws_request_id,
        "function_name": context.function_name,
        "function_version": context.function_version,
        "memory_limit_in_mb": context.memory_limit_in_mb,
        "invoked_function_arn": context.invoked_function_arn,
        "remaining_time_in_millis": context.get_remaining_time_in_millis(),
    }


def raw_bytes(event: Any, context: Any) -> bytes:
    return b"raw-output"


class Statistics:
    """Handler class; the bootstrap creates one instance per invocation."""

    def handle(self, event: Any, context: Any) -> Dict[str, Any]:
        """Return statistics for ``event["numbers"]``."""
        if not isinstance(event, dict) or "numbers" not in event:
            raise ValueError("Input must be a dictionary with a 'numbers' key containing a list")

        numbers = event["numbers"]
        if not isinstance(numbers, list) or not numbers:
            raise ValueError("'numbers' must be a non-empty list")

        try:
            numbers = [float(n) for n in numbers]
        except (ValueError, TypeError) as e:
            raise ValueError("All items in 'numbers' must be numeric") from e

        return sample_stats.describe(numbers)

    @staticmethod
    def slow(event: Any, context: Any) -> Dict[str, Any]:
        """Sleep for ``event["sleep_seconds"]``."""
        sleep_time = event.get("sleep_seconds", 0.1) if isinstance(event, dict) else 0.1
        start_time = time.monotonic()
        time.sleep(sleep_time)
        return {"actual_sleep_seconds": time.monotonic() - start_time}


class Greeter(LambdaFunction):
    """Class-based handler resolved from ``sample_functions::Greeter``."""

    def handle(self, event: Any, context: Any) -> Dict[str, Any]:
        name = event.get("name", "World") if isinstance(event, dict) else "World"
        logger.info("Greeting %s", name)
        return {"greeting": f"Hello, {name}!"}


class ErrorFunction:
    """Raises different types of errors based on the event."""

    def handle(self, event: Any, context: Any) -> Any:
        if not isinstance(event, dict):
            raise ValueError("Input must be a dictionary with 'error_type' key")

        error_type = event.get("error_type", "value_error")
        message = event.get("message", "This is a test error")

        if error_type == "value_error":
            raise ValueError(message)
        elif error_type == "runtime_error":
            raise RuntimeError(message)
        elif error_type == "chained":
            try:
                {}["nonexistent_key"]
            except KeyError as e:
                raise RuntimeError(message) from e
        elif error_type == "zero_division":
            return 1 / 0
        return {"message": "No error raised", "error_type": error_type}
