"""Exception types raised by imagekit-web."""


class ImageKitWebError(Exception):
    """Base class for all imagekit-web errors."""


class InvalidInputError(ImageKitWebError, ValueError):
    """Raised for malformed or missing input (empty path, no breakpoints, ...)."""


class UnsupportedTransformationError(InvalidInputError):
    """Raised when a transformation value falls outside the supported value types."""


class ConfigurationError(ImageKitWebError):
    """Raised when settings cannot be read from a file or the environment."""
