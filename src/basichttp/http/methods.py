"""
=============================================================================
HTTP METHODS
=============================================================================

The closed vocabulary of request methods the parser accepts. The first
token of the request line must be one of these, spelled exactly as below:

    GET      Retrieve resource
    POST     Create resource / submit data
    PUT      Replace resource
    PATCH    Partial update
    DELETE   Delete resource
    HEAD     GET without body
    OPTIONS  Get allowed methods (CORS preflight)
    TRACE    Echo request (debugging)

Method tokens are case-sensitive (RFC 7230 §3.1.1): "get" is not GET.
CONNECT is deliberately absent; this server is not a proxy.

=============================================================================
"""

from enum import Enum

from .errors import HTTPParseError


class HTTPMethod(Enum):
    """
    HTTP request method.

    The member value is the wire token, so str(method.value) is what
    appears on the request line:

        >>> HTTPMethod.from_token("POST")
        <HTTPMethod.POST: 'POST'>
        >>> HTTPMethod.DELETE.value
        'DELETE'
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_token(cls, token: str) -> "HTTPMethod":
        """
        Map a request-line token to its method.

        Args:
            token: First whitespace-delimited token of the request line.

        Returns:
            The matching HTTPMethod.

        Raises:
            HTTPParseError: If the token is not a supported method. An
                unknown method never falls back to a default.
        """
        try:
            return cls(token)
        except ValueError:
            raise HTTPParseError(f"Invalid method: {token!r}", status_code=405) from None
