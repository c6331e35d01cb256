"""
HTTP protocol errors.
"""


class HTTPParseError(Exception):
    """
    Raised when a request cannot be read or parsed.

    Carries the HTTP status code that classifies the failure:

        400 Bad Request            - Malformed request line or headers
        405 Method Not Allowed     - Unknown/unsupported method
        413 Payload Too Large      - Declared body exceeds the size limit
        431 Header Fields Too Large - Header block exceeds the size limit

    The server never answers a request it could not parse; the code only
    appears in the log line written when the connection is dropped.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
