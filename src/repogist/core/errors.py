"""Exception hierarchy for the ingestion pipeline.

Every failure that aborts a request derives from IngestionError so transports
can map the whole family to a single "ingestion failed" response while still
attaching the specific message for diagnostics. InvalidReference is the one
kind transports report separately, because it is detected before any
resource is allocated.
"""


class IngestionError(Exception):
    """Base exception for all pipeline failures."""


class InvalidReference(IngestionError):
    """The input string is not a recognized Git repository reference."""


class InsufficientDiskSpace(IngestionError):
    """Temporary storage does not have the required headroom."""


class UnsupportedHost(IngestionError):
    """Branch or archive lookup attempted against an unrecognized host."""


class UpstreamLookupFailed(IngestionError):
    """The provider's repository metadata endpoint did not answer successfully."""


class DownloadTooLarge(IngestionError):
    """The archive is larger than the configured download cap."""


class DownloadFailed(IngestionError):
    """Network or stream error while downloading the archive."""


class ExtractionFailed(IngestionError):
    """The archive could not be unpacked into the workspace."""


class WorkspaceUnavailable(IngestionError):
    """The workspace root is missing when content extraction starts."""


# Kind label recorded on per-file diagnostics; never raised.
PARTIAL_FILE_READ = "PartialFileReadError"
