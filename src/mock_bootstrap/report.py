"""
Report line formatting.

These lines are grepped by tooling that expects the managed runtime's exact
layout, including the double space after END and the missing colons in the
REPORT line.
"""

BYTES_PER_MB = 1024 * 1024


def to_megabytes(num_bytes: int) -> int:
    return int(num_bytes) // BYTES_PER_MB


def start_line(request_id: str, function_version: str) -> str:
    return f"START RequestId: {request_id} Version: {function_version}"


def end_line(request_id: str) -> str:
    return f"END  RequestId: {request_id}"


def report_line(request_id: str,
                duration_ms: int,
                billed_duration_ms: int,
                memory_size_mb: int,
                max_memory_used_mb: int) -> str:
    return (f"REPORT RequestId {request_id}\t"
            f"Duration: {duration_ms} ms\t"
            f"Billed Duration: {billed_duration_ms} ms\t"
            f"Memory Size {memory_size_mb} MB\t"
            f"Max Memory Used: {max_memory_used_mb} MB")
