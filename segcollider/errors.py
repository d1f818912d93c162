"""Exception and warning types raised by the collider pipelines."""


class SegColliderError(Exception):
    """Base class for collider generation failures."""


class MissingAttributeError(SegColliderError):
    """Raised when the secondary UV channel carrying segment ids is absent or empty."""


class UnreadableMeshError(SegColliderError):
    """Raised when the source mesh data cannot be read."""


class InvalidSegmentIdError(SegColliderError, ValueError):
    """Raised when a segment id value is not finite or does not fit an int64."""


class ConfigurationWarning(UserWarning):
    """Non-fatal signal for multi-chunk splits and degenerate voxel parameters."""
