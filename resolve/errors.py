"""Error taxonomy shared by resolvers, providers and the command handler."""

from __future__ import annotations


class ResolutionError(Exception):
    pass


class ParseError(ResolutionError):
    """Date/time text is not in a recognized format or names an impossible date."""


class NotFoundError(ResolutionError):
    """No channel, no same-day broadcasts, or no broadcast window contains the target."""


class AuthError(ResolutionError):
    """Provider credentials were rejected even after a token refresh."""


class TransportError(ResolutionError):
    """Network or HTTP-layer failure talking to a provider."""


class HTTPStatusError(TransportError):
    def __init__(self, status: int, body: str = "", *, url: str = "") -> None:
        super().__init__(f"HTTP {status} for {url}: {body[:200]}")
        self.status = status
        self.body = body
        self.url = url
