"""
Failure taxonomy for the submission endpoints.

Every error carries the HTTP status it maps to and a generic message that is
safe to show to the browser. Internal details stay in the logs.
"""


class SubmissionError(Exception):
    status_code = 500
    public_message = 'Something went wrong'

    def __init__(self, message=None, detail=None):
        self.message = message or self.public_message
        self.detail = detail
        super().__init__(detail or self.message)


class InvalidInput(SubmissionError):
    """Missing or malformed required field. Raised before any outbound call."""
    status_code = 400
    public_message = 'Invalid input'


class PersistenceError(SubmissionError):
    """Store unavailable or write rejected."""
    status_code = 500
    public_message = 'Failed to save record'


class GatewayError(SubmissionError):
    """Payment gateway call failed or answered with an error."""
    status_code = 500
    public_message = 'Failed to create order'


class VerificationFailed(SubmissionError):
    """Payment signature does not match the gateway's keyed signature."""
    status_code = 400
    public_message = 'Payment verification failed'
