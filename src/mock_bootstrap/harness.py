"""
Invocation harness for the Mock Lambda Bootstrap

This module runs exactly one invocation: it brackets the handler call with
the START / END / REPORT lines, captures the result or the exception, and
writes the outcome to the right stream.
"""

import logging
import os
import sys
from contextlib import contextmanager, redirect_stdout
from typing import Mapping, Optional, TextIO

import psutil

from . import report
from .function_interface import (
    ExecutionOutcome,
    Failure,
    HandlerExecutionError,
    HandlerResolutionError,
    Success,
)
from .handler_locator import HandlerLocator, HandlerReference
from .invocation_context import InvocationContext, LambdaContext


def memory_used_bytes() -> int:
    """Resident memory of the current process."""
    return psutil.Process().memory_info().rss


@contextmanager
def forwarded_environment(environment: Mapping[str, str]):
    """Expose the invocation environment through os.environ while user code runs."""
    saved = dict(os.environ)
    # Names the OS would reject cannot be forwarded.
    os.environ.update({k: v for k, v in environment.items() if k and "=" not in k})
    try:
        yield
    finally:
        os.environ.clear()
        os.environ.update(saved)


class InvocationHarness:
    """
    Single-shot invocation driver.

    Handler failures never propagate out of ``invoke`` or ``run``; they are
    returned as a Failure outcome and printed to the diagnostic stream.
    """

    def __init__(self,
                 context: InvocationContext,
                 locator: Optional[HandlerLocator] = None,
                 stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None):
        """
        Initialize the harness.

        Args:
            context: Context of the invocation to run
            locator: Locator used by ``run`` to resolve handler identifiers
            stdout: Stream for the handler result (defaults to sys.stdout)
            stderr: Diagnostic stream (defaults to sys.stderr)
        """
        self.context = context
        self.locator = locator
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.logger = logging.getLogger(__name__)

    def run(self, identifier: str) -> ExecutionOutcome:
        """
        Resolve ``identifier`` and invoke it.

        A resolution failure is reported like any other failed invocation,
        report lines included.
        """
        self._log_start()
        with forwarded_environment(self.context.environment):
            try:
                if self.locator is None:
                    raise HandlerResolutionError("No handler locator configured")
                with redirect_stdout(self.stderr):
                    handler = self.locator.resolve(identifier)
            except HandlerResolutionError as e:
                self.logger.debug("Handler resolution failed: %s", e)
                outcome: ExecutionOutcome = Failure(e)
            else:
                outcome = self._call(handler)
        return self._finish(outcome)

    def invoke(self, handler: HandlerReference) -> ExecutionOutcome:
        """Invoke an already resolved handler."""
        self._log_start()
        with forwarded_environment(self.context.environment):
            outcome = self._call(handler)
        return self._finish(outcome)

    def _call(self, handler: HandlerReference) -> ExecutionOutcome:
        lambda_context = LambdaContext(self.context, log_stream=self.stderr)
        try:
            # Handler prints belong to the diagnostic stream, like the runtime's log output.
            with redirect_stdout(self.stderr):
                handler.invoke(self.context.input_stream, self.context.output, lambda_context)
        except (Exception, SystemExit) as e:
            error = HandlerExecutionError(f"{e.__class__.__name__}: {e}")
            error.__cause__ = e
            self.logger.debug("Handler %s raised %r", handler.identifier, e)
            return Failure(error)
        return Success(self.context.output_bytes)

    def _finish(self, outcome: ExecutionOutcome) -> ExecutionOutcome:
        duration_ms = self.context.duration_ms()
        self._log_end(duration_ms)

        if outcome.success:
            self._write_output(outcome.output)
        else:
            self._emit(outcome.describe())
        return outcome

    def _write_output(self, output: bytes) -> None:
        buffer = getattr(self.stdout, "buffer", None)
        if buffer is not None:
            # Raw bytes go out unchanged when the stream has a binary layer.
            self.stdout.flush()
            buffer.write(output + b"\n")
            buffer.flush()
        else:
            self.stdout.write(output.decode("utf-8", errors="replace") + "\n")
            self.stdout.flush()

    def _log_start(self) -> None:
        self._emit(report.start_line(self.context.request_id, self.context.function_version))

    def _log_end(self, duration_ms: int) -> None:
        self._emit(report.end_line(self.context.request_id))
        self._emit(report.report_line(
            self.context.request_id,
            duration_ms,
            duration_ms,
            self.context.memory_limit_mb,
            report.to_megabytes(memory_used_bytes()),
        ))

    def _emit(self, line: str) -> None:
        self.stderr.write(line + "\n")
        self.stderr.flush()
