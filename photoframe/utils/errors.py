class MergeError(Exception):
    """Base class for everything the merger raises."""


class FetchError(MergeError):
    """The source could not be read, or it was empty."""


class DecodeError(MergeError):
    """The bytes are not a valid image."""


class UnsupportedFormatError(DecodeError):
    """The file extension has no matching decoder."""


class InvalidGeometryError(MergeError):
    """A reference dimension or target rectangle is zero or negative."""


class OutOfBoundsError(MergeError):
    """The mapped source rectangle does not overlap the background."""
