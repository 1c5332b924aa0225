"""Error types raised by the analysis, render and synthesis jobs."""


class MelodyStudioError(Exception):
    """Base class for all Melody Studio failures."""


class InputUnreadable(MelodyStudioError):
    """Source audio is missing, corrupt, or too short for one analysis window."""


class NoVoicedContent(MelodyStudioError):
    """The pitch track contains no voiced frames."""


class EmptyEditRange(MelodyStudioError):
    """The trim range holds no notes to synthesize."""


class RenderTargetUnwritable(MelodyStudioError):
    """The output file could not be created or written."""


class RenderError(MelodyStudioError):
    """A render request is structurally invalid (e.g. has no segments)."""


class SnapshotUnavailable(MelodyStudioError):
    """A requested snapshot does not exist or A/B compare has nothing to compare."""
