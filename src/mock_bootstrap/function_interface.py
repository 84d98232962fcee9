"""
Core Function Interface for the Mock Lambda Bootstrap

This module defines the outcome of a single invocation, the error kinds the
bootstrap reports, and an optional base class for class-based handlers.
"""

from abc import ABC, abstractmethod
from typing import Any, Union
from dataclasses import dataclass
import traceback


class MockRuntimeError(Exception):
    """Base class for errors reported by the bootstrap."""
    pass


class HandlerResolutionError(MockRuntimeError):
    """Raised when a handler identifier cannot be turned into a callable."""
    pass


class InvocationInputError(MockRuntimeError):
    """Raised when the request body is not well-formed JSON."""
    pass


class HandlerExecutionError(MockRuntimeError):
    """Wraps any exception raised by user handler code."""
    pass


@dataclass(frozen=True)
class Success:
    """
    Successful invocation.

    Attributes:
        output: Bytes the handler wrote to its output stream
    """
    output: bytes = b""

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """
    Failed invocation.

    Attributes:
        error: The captured exception (resolution or execution error)
    """
    error: BaseException

    @property
    def success(self) -> bool:
        return False

    @property
    def error_type(self) -> str:
        return self.error.__class__.__name__

    def describe(self) -> str:
        """Full description of the error, including its cause chain."""
        return "".join(
            traceback.format_exception(type(self.error), self.error, self.error.__traceback__)
        ).rstrip("\n")


ExecutionOutcome = Union[Success, Failure]


class LambdaFunction(ABC):
    """
    Optional base class for class-based handlers.

    A handler identifier of the form ``module::ClassName`` that names a
    subclass resolves to an instance's ``handle`` method.
    """

    @abstractmethod
    def handle(self, event: Any, context: Any) -> Any:
        """
        Handle a single invocation.

        Args:
            event: The JSON-decoded request body
            context: The LambdaContext for this invocation

        Returns:
            Result to serialize into the output stream
        """
        pass
