"""Exception types raised at the collaborator boundaries."""


class MediConnectError(Exception):
    """Base class for all assistant errors."""


class ResponseStreamError(MediConnectError):
    """The text generation backend could not open a channel or stream a turn."""


class PaymentGatewayError(MediConnectError):
    """The payment gateway could not be loaded or invoked."""
