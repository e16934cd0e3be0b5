class SkuHubError(Exception):
    pass


class ValidationError(SkuHubError):
    """Bad input: price out of range, malformed barcode, unknown SKU format."""


class NotFoundError(SkuHubError):
    """Missing business, product, variant, barcode or template."""


class AuthorizationError(SkuHubError):
    """Raised by the caller-side authorization layer; never derived here."""


class IntegrityError(SkuHubError):
    """
    A mutation would break a stored invariant (e.g. removing a product's only
    barcode) or lost a race on a unique constraint. The message is meant to be
    shown to the user as-is.
    """


class DuplicateBarcodeError(IntegrityError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Barcode {code} is already assigned to a product")
