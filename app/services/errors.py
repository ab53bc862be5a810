"""
Error taxonomy shared by services and rendered by the exception handlers in app.main
"""


class QuizCatError(Exception):
    """Base class for errors that map onto a client-facing response"""
    
    status_code = 500
    error = "internal_server_error"
    
    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra
    
    def to_dict(self) -> dict:
        body = {
            "error": self.error,
            "message": self.message,
            "status_code": self.status_code,
        }
        body.update(self.extra)
        return body


class ValidationError(QuizCatError):
    """Malformed or missing input; rejected before the store is touched"""
    status_code = 400
    error = "validation_error"


class NotAuthenticatedError(QuizCatError):
    status_code = 401
    error = "not_authenticated"
    
    def __init__(self, message: str = "Not authenticated", **extra):
        super().__init__(message, **extra)


class NotFoundError(QuizCatError):
    """Identity resolved but no profile row, or the requested content id does not exist"""
    status_code = 404
    error = "not_found"


class StoreError(QuizCatError):
    """Underlying read/write failed; prior data is left untouched"""
    status_code = 503
    error = "store_failure"


class ForbiddenError(QuizCatError):
    """Caller is known but the requested item is still locked for them"""
    status_code = 403
    error = "forbidden"
