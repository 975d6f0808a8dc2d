"""
Application error taxonomy.

Every error raised across a service boundary derives from AppError and carries
the HTTP status the error handlers translate it to.
"""


class AppError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message=None, status_code=None, details=None):
        self.message = message or self.__class__.default_message()
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    @classmethod
    def default_message(cls):
        return "Internal server error"

    def to_dict(self):
        body = {"success": False, "error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    status_code = 400
    code = "validation_failed"

    @classmethod
    def default_message(cls):
        return "Validation failed"


class EventPayloadError(AppError):
    """A verified webhook event whose shape cannot be reconciled."""
    status_code = 400
    code = "invalid_event_payload"

    @classmethod
    def default_message(cls):
        return "Malformed webhook event"


class SignatureError(AppError):
    """Webhook signature mismatch. Permanent; the sender must not retry."""
    status_code = 400
    code = "signature_verification_failed"

    @classmethod
    def default_message(cls):
        return "Webhook signature verification failed"


class GatewayError(AppError):
    """The payment vendor rejected the request."""
    status_code = 400
    code = "gateway_error"

    def __init__(self, message=None, vendor_code=None, **kwargs):
        self.vendor_code = vendor_code
        super().__init__(message, **kwargs)

    @classmethod
    def default_message(cls):
        return "Payment provider rejected the request"


class AuthenticationError(AppError):
    status_code = 401
    code = "authentication_failed"

    @classmethod
    def default_message(cls):
        return "Invalid credentials"


class ForbiddenError(AppError):
    status_code = 403
    code = "forbidden"

    @classmethod
    def default_message(cls):
        return "Admin access required"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"

    @classmethod
    def default_message(cls):
        return "Resource not found"


class ConflictError(AppError):
    status_code = 409
    code = "conflict"

    @classmethod
    def default_message(cls):
        return "Resource already exists"


class ReconciliationError(AppError):
    """Persisting a vendor event failed. Transient; the sender should retry."""
    status_code = 500
    code = "reconciliation_failed"

    @classmethod
    def default_message(cls):
        return "Failed to process webhook"


class NotConfiguredError(AppError):
    """Billing is disabled because no vendor credentials are configured."""
    status_code = 503
    code = "billing_disabled"

    @classmethod
    def default_message(cls):
        return "Stripe is not configured"


class MissingOwnerError(AppError):
    """
    A vendor object has no usable owner: the userId metadata is absent or
    names a user that does not exist.

    The webhook route logs and drops these; they never reach the client.
    """
    status_code = 200
    code = "missing_owner"

    def __init__(self, object_type, object_id, owner_id=None):
        self.object_type = object_type
        self.object_id = object_id
        self.owner_id = owner_id
        if owner_id:
            message = f"Unknown user {owner_id} for {object_type} {object_id}"
        else:
            message = f"No userId in metadata for {object_type} {object_id}"
        super().__init__(message)
