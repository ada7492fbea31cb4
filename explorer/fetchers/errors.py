class UpstreamError(Exception):
    """An external collaborator failed to return a usable response."""
