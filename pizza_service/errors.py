"""
Failure classes raised by the session and order services.

The services raise these unchanged to their caller; mapping to HTTP status
codes happens only in the router layer (see `http_status`).
"""


class PizzaServiceError(Exception):
    """Base class for classified service failures"""

    http_status = 500


class MalformedCredential(PizzaServiceError):
    """Raised when a credential has no extractable signature fragment"""

    http_status = 401


class NotFound(PizzaServiceError):
    """Raised when a catalog or session lookup comes back empty"""

    http_status = 404


class ValidationError(PizzaServiceError):
    """Raised when a request is badly shaped (empty items, bad price)"""

    http_status = 400


class ConnectivityError(PizzaServiceError):
    """Raised when storage is unreachable or a query fails for non-data reasons"""

    http_status = 502


class Timeout(PizzaServiceError):
    """Raised when a caller-supplied deadline expires"""

    http_status = 504
