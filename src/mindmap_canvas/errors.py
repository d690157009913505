"""Error kinds raised by the mindmap core.

Every error is recoverable: the session catches ``MindmapError``, keeps its
previous state and reports the message to the user.
"""


class MindmapError(Exception):
    """Base class for all recoverable mindmap errors."""


class NotFoundError(MindmapError):
    """A mutation targeted a node id that is not in the tree."""


class InvalidOperationError(MindmapError):
    """The operation is refused, e.g. deleting the root."""


class InvalidFormatError(MindmapError):
    """An imported document is unparsable or fails shape validation."""


class ExternalFailureError(MindmapError):
    """The content generator failed or returned an unusable document."""


class StorageError(MindmapError):
    """A document file could not be written."""
