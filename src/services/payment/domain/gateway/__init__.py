from .payment_gateway import PaymentGateway

__all__ = ["PaymentGateway"]
