"""HTTP error helpers shared by routers."""

from .errors import batch_failure_response, http_error

__all__ = ["batch_failure_response", "http_error"]
