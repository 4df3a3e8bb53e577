from mediconnect.payments.gateway import MockPaymentGateway, PaymentGateway
from mediconnect.payments.orchestrator import PaymentOrchestrator

__all__ = ["PaymentGateway", "MockPaymentGateway", "PaymentOrchestrator"]
