"""Error taxonomy shared by the search components and the HTTP layer."""


class InvalidArgument(ValueError):
    """Raised when a caller-supplied value fails validation."""


class UpstreamUnavailable(RuntimeError):
    """Raised when the record store cannot be reached or a query fails."""


class ProviderError(RuntimeError):
    """Raised when the distance provider cannot produce a distance."""


class SearchCancelled(RuntimeError):
    """Raised when a nearby search is cancelled or runs past its deadline."""
