from dataclasses import dataclass


@dataclass(frozen=True)
class ToolResult:
    """
    Immutable record of one successful tool execution.

    Failures never become ToolResults: structural failures are raised
    by the dispatcher, and domain failures are encoded by the handler
    as ordinary descriptive text in ``output``.

    Attributes
    ----------
    tool_name : str
        Name of the tool that was executed.

    output : str
        Opaque text payload returned verbatim by the handler.

    call_id : str
        Id of the ToolCall this result answers.

    latency_ms : int
        Execution time in milliseconds (monotonic).
    """

    tool_name: str
    output: str
    call_id: str = ""
    latency_ms: int = 0

    def preview(self, limit: int = 500) -> str:
        """Output capped for log lines."""
        if len(self.output) <= limit:
            return self.output
        return self.output[:limit] + "..."
