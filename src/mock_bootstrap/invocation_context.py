"""
Invocation context for the Mock Lambda Bootstrap

Builds the per-invocation metadata (request id, deadline, memory limit) from
CLI arguments and configuration, and exposes it to handlers through a
LambdaContext shaped like the one the managed Python runtime passes.
"""

import io
import json
import sys
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import cached_property
from typing import Callable, Mapping, NamedTuple, Optional, Sequence, TextIO

from .config import Config
from .function_interface import InvocationInputError


@dataclass(frozen=True)
class InvocationContext:
    """
    Metadata for one invocation.

    The deadline is fixed when the context is created; durations are always
    computed from the clock.
    """
    request_id: str
    function_name: str
    function_version: str
    memory_limit_mb: int
    timeout_seconds: int
    region: str
    account_id: str
    body: bytes = b"{}"
    environment: Mapping[str, str] = field(default_factory=dict, repr=False)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)
    started_at: float = field(default=None, compare=False)
    deadline: float = field(init=False, compare=False)
    output: io.BytesIO = field(default_factory=io.BytesIO, repr=False, compare=False)

    def __post_init__(self):
        if self.started_at is None:
            object.__setattr__(self, "started_at", self.clock())
        object.__setattr__(self, "deadline", self.started_at + self.timeout_seconds)

    def duration_ms(self) -> int:
        return int((self.clock() - self.started_at) * 1000)

    def remaining_ms(self) -> int:
        return max(0, int((self.deadline - self.clock()) * 1000))

    @property
    def invoked_function_arn(self) -> str:
        return f"arn:aws:lambda:{self.region}:{self.account_id}:function:{self.function_name}"

    @property
    def input_stream(self) -> io.BytesIO:
        return io.BytesIO(self.body)

    @property
    def output_bytes(self) -> bytes:
        return self.output.getvalue()


class CognitoIdentity:
    """Client identity placeholder; a local invocation has no Cognito caller."""

    def __init__(self, cognito_identity_id: Optional[str] = None,
                 cognito_identity_pool_id: Optional[str] = None):
        self.cognito_identity_id = cognito_identity_id
        self.cognito_identity_pool_id = cognito_identity_pool_id


class LambdaContext:
    """The context object handed to the handler."""

    def __init__(self, invocation: InvocationContext, log_stream: Optional[TextIO] = None):
        self._invocation = invocation
        self._log_stream = log_stream
        self.aws_request_id = invocation.request_id
        self.function_name = invocation.function_name
        self.function_version = invocation.function_version
        self.memory_limit_in_mb = invocation.memory_limit_mb
        self.log_group_name = f"/aws/lambda/{invocation.function_name}"
        self.log_stream_name = "{}/[{}]{}".format(
            datetime.now(timezone.utc).strftime("%Y/%m/%d"),
            invocation.function_version,
            uuid.uuid4().hex,
        )
        self.client_context = None

    @cached_property
    def invoked_function_arn(self) -> str:
        return self._invocation.invoked_function_arn

    @cached_property
    def identity(self) -> CognitoIdentity:
        return CognitoIdentity()

    def get_remaining_time_in_millis(self) -> int:
        return self._invocation.remaining_ms()

    def log(self, text: str) -> None:
        stream = self._log_stream if self._log_stream is not None else sys.stderr
        stream.write(text if text.endswith("\n") else text + "\n")
        stream.flush()


class InvocationRequest(NamedTuple):
    context: InvocationContext
    handler: str
    task_root: str


def build_invocation(args: Sequence[str], config: Config,
                     clock: Callable[[], float] = time.monotonic) -> InvocationRequest:
    """
    Build the invocation context and pick the handler identifier.

    Positional arguments win over the environment: ``args[0]`` is the
    handler, ``args[1]`` the JSON request body.

    Raises:
        InvocationInputError: If the request body is not valid UTF-8 JSON
    """
    handler = args[0] if len(args) > 0 else config.runtime.handler
    body = args[1] if len(args) > 1 else config.runtime.event_body

    try:
        json.loads(body)
        body_bytes = body.encode("utf-8")
    except (json.JSONDecodeError, UnicodeEncodeError) as e:
        raise InvocationInputError(f"Request body is not valid JSON: {e}") from e

    function = config.function
    context = InvocationContext(
        request_id=str(uuid.uuid4()),
        function_name=function.name,
        function_version=function.version,
        memory_limit_mb=function.memory_size_mb,
        timeout_seconds=function.timeout_seconds,
        region=function.region,
        account_id=function.account_id,
        body=body_bytes,
        environment=dict(config.environ),
        clock=clock,
    )
    return InvocationRequest(context, handler, config.runtime.task_root)
