"""Exception hierarchy for the possible-area engine."""


class SeekAreaError(Exception):
    """Base class for every error the engine reports to its host."""


class InsufficientInputError(SeekAreaError):
    """Raised when an operator cannot run with the current session state."""


class ProviderError(SeekAreaError):
    """Raised when a POI or geocoding collaborator fails or times out."""


class GeometryError(SeekAreaError):
    """Raised when no usable geometry can be produced at all."""


class SessionBusyError(SeekAreaError):
    """Raised when an operation is requested while another one is pending."""


class SamplingError(GeometryError):
    """Raised when sampling a candidate yields no interior points."""
