class InvalidVoucher(ValueError):
    """Raised when a voucher code cannot be applied to an order."""

    def __init__(self, code, reason):
        super().__init__(f"Invalid voucher {code}: {reason}")
        self.code = code
        self.reason = reason
