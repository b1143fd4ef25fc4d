"""
Exception hierarchy for melfront.

Every configuration problem is a ``ValueError`` so existing callers that
catch ``ValueError`` around the DSP helpers keep working.
"""


class MelfrontError(Exception):
    """Base class for all melfront errors."""


class ConfigurationError(MelfrontError, ValueError):
    """Invalid parameters, detected before any computation starts."""


class InvalidLengthError(ConfigurationError):
    """FFT length is not supported by the requested plan."""


class BufferShapeError(ConfigurationError):
    """A caller-supplied buffer has the wrong size, dtype or layout."""


class UnknownWindowTypeError(ConfigurationError):
    pass


class InvalidNormError(ConfigurationError):
    pass


class InvalidMelScaleError(ConfigurationError):
    pass


class UnsupportedPadModeError(ConfigurationError, NotImplementedError):
    """Only reflect padding is implemented for centred frames."""


class AliasingError(MelfrontError, ValueError):
    """Input and output buffers of a transform share memory."""
