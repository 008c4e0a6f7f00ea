"""
Export engine exception taxonomy.

Faults (FetchFault, SinkFault, SerializeFault) end a run in the ERROR state and
keep whatever was already written. ExportAborted ends a run in the ABORTED
state after the partial output has been removed; it carries no message.
"""

from typing import Any


class ExportError(Exception):
    """Base class for every failure surfaced by the export engine."""


class ExportFault(ExportError):
    """A collaborator failed while the job was running."""

    def __init__(self, message: str, context: Any = None):
        if context:
            super().__init__(f"{message} (Context: {context})")
        else:
            super().__init__(message)
        self.context = context


class FetchFault(ExportFault):
    """The data source could not produce a page (connection or query error)."""


class SinkFault(ExportFault):
    """The output target could not be truncated, written, sized or deleted."""


class SerializeFault(ExportFault):
    """The serializer failed to render a header, footer or page."""


class ExportAborted(ExportError):
    """The job was cancelled; its output file has been deleted."""

    def __init__(self):
        super().__init__()
