class InvalidTransition(ValueError):
    """Raised when a status change is not permitted for the acting role."""

    def __init__(self, current, target, role=None, message=None):
        super().__init__(message or f"Invalid booking status transition: {current} -> {target} (role: {role})")
        self.current = current
        self.target = target
        self.role = role


class PhotoLinkRequired(InvalidTransition):
    def __init__(self, current, target, role=None):
        super().__init__(
            current, target, role,
            message=f"A photo link is required before moving a booking to {target}",
        )


class PrintOrderError(ValueError):
    pass
