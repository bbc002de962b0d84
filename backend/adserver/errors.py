"""
Error taxonomy shared by the ad store, targeting, attribution and analytics
services. The HTTP layer maps each class to a status code in main.py.
"""


class AdServerError(Exception):
    """Base class for every error raised by the ad server core"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AdServerError):
    """Malformed or missing required field"""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class NotFoundError(AdServerError):
    """Reference to an ad or campaign that does not exist"""


class NoAdsAvailableError(AdServerError):
    """The eligible candidate pool is empty"""


class RetryableError(AdServerError):
    """Storage timeout or contention, safe to retry with backoff"""


class FatalError(AdServerError):
    """Storage could not be initialized"""
