"""
Mock Lambda Bootstrap - Main Driver

Runs one invocation of a handler from the task root, the way the managed
runtime would, and prints the START / END / REPORT lines.

Usage Examples:
    # Handler and event on the command line
    mock-bootstrap lambda_function::handler '{"key": "value"}'

    # Class-based handler
    mock-bootstrap 'MyAssembly::MyNamespace.MyClass::Handle'

    # Everything from the environment
    LAMBDA_TASK_ROOT=./task AWS_LAMBDA_FUNCTION_HANDLER=app.handler mock-bootstrap
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from .config import Config
from .function_interface import ExecutionOutcome, InvocationInputError
from .handler_locator import HandlerLocator, TaskRootFinder
from .harness import InvocationHarness
from .invocation_context import build_invocation


class MockBootstrapDriver:
    """Main driver for a single local invocation."""

    def __init__(self,
                 config: Config,
                 stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None,
                 finder: Optional[TaskRootFinder] = None):
        self.config = config
        self.finder = finder
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.logger = self._setup_logging()

    def _setup_logging(self) -> logging.Logger:
        """Setup logging configuration."""
        logging.basicConfig(
            level=getattr(logging, self.config.logging.level.upper(), logging.INFO),
            format=self.config.logging.format,
            stream=self.stderr
        )
        return logging.getLogger(__name__)

    def run(self, args: List[str]) -> Optional[ExecutionOutcome]:
        """
        Build the context, resolve the handler and invoke it once.

        Returns:
            The outcome, or None if the request body was malformed
        """
        try:
            request = build_invocation(args, self.config)
        except InvocationInputError as e:
            self.logger.debug("Rejected request body: %s", e)
            self.stderr.write(f"{e.__class__.__name__}: {e}\n")
            self.stderr.flush()
            return None

        self.logger.debug("Invoking %r from task root %s", request.handler, request.task_root)
        locator = HandlerLocator(request.task_root, finder=self.finder)
        harness = InvocationHarness(request.context, locator,
                                    stdout=self.stdout, stderr=self.stderr)
        return harness.run(request.handler)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mock-bootstrap",
        description="Run a Lambda handler once, locally, with managed-runtime style reporting"
    )
    parser.add_argument(
        "handler",
        nargs="?",
        help="Handler identifier, e.g. module::function or module::Type::method "
             "(default: $AWS_LAMBDA_FUNCTION_HANDLER)"
    )
    parser.add_argument(
        "event",
        nargs="?",
        help="JSON request body (default: $AWS_LAMBDA_CONTEXT or {})"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None,
         config: Optional[Config] = None,
         stdout: Optional[TextIO] = None,
         stderr: Optional[TextIO] = None) -> int:
    """Entry point. Always exits 0; errors are reported on stderr."""
    ns = parse_args(argv)
    args = [a for a in (ns.handler, ns.event) if a is not None]

    driver = MockBootstrapDriver(config or Config.from_environment(), stdout=stdout, stderr=stderr)
    driver.run(args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
