"""
Output Helpers.

Rich markup shared by the command modules.
"""

from nestor.jenkins.status import Status, StatusCode

STATUS_COLORS = {
    StatusCode.OK: "green",
    StatusCode.WARN: "yellow",
    StatusCode.FAIL: "red",
    StatusCode.ABORTED: "dim",
}


def status_text(status: Status | None) -> str:
    """Plain status label; unknown tokens print as received (uppercased)."""
    if status is None:
        return "UNKNOWN"
    if isinstance(status, StatusCode):
        return status.value
    return str(status)


def status_markup(status: Status | None) -> str:
    color = STATUS_COLORS.get(status) if isinstance(status, StatusCode) else None
    label = status_text(status)
    if color is None:
        return label
    return f"[{color}]{label}[/{color}]"
