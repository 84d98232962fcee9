"""
Mock Lambda Bootstrap

Runs a single function invocation locally: loads a handler from the task
root, builds its invocation context, and reports timing and memory the way
the managed runtime does.
"""

from .function_interface import (
    ExecutionOutcome,
    Failure,
    HandlerExecutionError,
    HandlerResolutionError,
    InvocationInputError,
    LambdaFunction,
    MockRuntimeError,
    Success
)

from .handler_locator import (
    HandlerLocator,
    HandlerReference,
    TaskRootFinder,
    default_finder,
    parse_handler
)

from .invocation_context import (
    InvocationContext,
    InvocationRequest,
    LambdaContext,
    build_invocation
)

from .harness import InvocationHarness
from .config import Config

__all__ = [
    'Config',
    'ExecutionOutcome',
    'Failure',
    'HandlerExecutionError',
    'HandlerLocator',
    'HandlerReference',
    'HandlerResolutionError',
    'InvocationContext',
    'InvocationHarness',
    'InvocationInputError',
    'InvocationRequest',
    'LambdaContext',
    'LambdaFunction',
    'MockRuntimeError',
    'Success',
    'TaskRootFinder',
    'build_invocation',
    'default_finder',
    'parse_handler'
]
