class OrderError(Exception):
    """Base error of the orders bounded context."""


class LineNotFoundError(OrderError):

    def __init__(self, line_id: str):
        super().__init__(f"Order line '{line_id}' not found")
        self.line_id = line_id


class PaymentNotFoundError(OrderError):

    def __init__(self, payment_id: str):
        super().__init__(f"Payment '{payment_id}' not found")
        self.payment_id = payment_id


class ProductNotFoundError(OrderError):

    def __init__(self, product_id: str):
        super().__init__(f"Catalog product '{product_id}' not found")
        self.product_id = product_id


class OrderValidationError(OrderError):
    """Raised when a draft cannot be finalized. Carries every failed check."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors
