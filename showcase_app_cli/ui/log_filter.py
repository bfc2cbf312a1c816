"""Console log filter for stage failures.

A failed stage is logged and also raised as a notification, which the CLI
renders as a panel. Attached to the console handler only, this filter
drops the log record so the failure is not shown twice. The run log file
keeps every record.
"""

import logging


class StageFailureLogFilter(logging.Filter):
    """Drop records tagged with an ``error_kind`` by the resolver."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Return False to suppress the record, True to let it through."""
        return not getattr(record, "error_kind", None)
