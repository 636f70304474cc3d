"""
Error taxonomy shared by services and the HTTP layer.

Services raise these; ``create_app`` registers a handler that turns them into
``{'error', 'code', 'request_id'}`` JSON bodies, so nothing above the service
layer needs its own try/except for expected failures.
"""


class TrustNestError(Exception):
    code = 'ERROR'
    status_code = 400
    retryable = False

    def __init__(self, message=None, details=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.details = details or {}

    def to_dict(self):
        payload = {
            'error': self.message,
            'code': self.code,
        }
        if self.details:
            payload['details'] = self.details
        if self.retryable:
            payload['retryable'] = True
        return payload


class ValidationError(TrustNestError):
    """Bad input, rejected before any state change"""
    code = 'VALIDATION_ERROR'
    status_code = 400


class NotFoundError(TrustNestError):
    code = 'NOT_FOUND'
    status_code = 404


class ForbiddenError(TrustNestError):
    code = 'FORBIDDEN'
    status_code = 403


class DependencyError(TrustNestError):
    """Persistence or storage unavailable; the whole operation may be retried"""
    code = 'DEPENDENCY_FAILURE'
    status_code = 503
    retryable = True


class StorageError(DependencyError):
    pass
