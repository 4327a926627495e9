from .client import ApiClient
from .errors import ApiError, ErrorKind, extract_message

__all__ = ["ApiClient", "ApiError", "ErrorKind", "extract_message"]
