"""
Business-rule error taxonomy

Every error carries a human readable message, a stable machine code and the
HTTP status the API layer answers with.
"""


class ServiceError(Exception):
    """Base class for errors raised by the service layer"""
    status_code = 500
    code = 'INTERNAL_ERROR'

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class ValidationError(ServiceError):
    """Required field missing or value outside its declared range/enum"""
    status_code = 400
    code = 'VALIDATION_ERROR'


class ConflictError(ServiceError):
    """Uniqueness violation"""
    status_code = 409
    code = 'CONFLICT'


class NotFoundError(ServiceError):
    """Entity absent or outside the caller's tenant"""
    status_code = 404
    code = 'NOT_FOUND'


class OverpaymentError(ServiceError):
    """Completed payments would exceed the invoice amount"""
    status_code = 422
    code = 'OVERPAYMENT'


class ImmutableStateError(ServiceError):
    """Mutation of a completed or refunded payment"""
    status_code = 409
    code = 'IMMUTABLE_STATE'


class InvalidStatusError(ServiceError):
    """Status outside the entity's enum, or an illegal transition"""
    status_code = 422
    code = 'INVALID_STATUS'


class ServiceTimeoutError(ServiceError):
    """Storage did not answer within the request deadline"""
    status_code = 503
    code = 'TIMEOUT'
