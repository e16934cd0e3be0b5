import re
from typing import Union

from skuhub.exceptions import ValidationError
from skuhub.models.barcode import BarcodeSymbology

MAX_CODE_LENGTH = 255

_DIGIT_LENGTHS = {
    BarcodeSymbology.UPC_A: (12, "UPC-A must be exactly 12 digits"),
    BarcodeSymbology.UPC_E: (6, "UPC-E must be exactly 6 digits"),
    BarcodeSymbology.EAN_13: (13, "EAN-13 must be exactly 13 digits"),
    BarcodeSymbology.EAN_8: (8, "EAN-8 must be exactly 8 digits"),
}

_CODE39 = re.compile(r"^[A-Z0-9\-\.\$/\+%\s]*$")
_CODABAR = re.compile(r"^[A-D][A-D0-9\-\.\$/\+%:\s]*[A-D]$")
_DIGITS = re.compile(r"^[0-9]+$")

PHARMACODE_MIN = 3
PHARMACODE_MAX = 131070

# label-printer spellings used by templates -> registry symbology
_TEMPLATE_ALIASES = {
    "code128": BarcodeSymbology.CODE128,
    "ean13": BarcodeSymbology.EAN_13,
    "ean8": BarcodeSymbology.EAN_8,
    "code39": BarcodeSymbology.CODE39,
    "upca": BarcodeSymbology.UPC_A,
    "itf14": BarcodeSymbology.ITF,
    "codabar": BarcodeSymbology.CODABAR,
    "msi": BarcodeSymbology.MSI,
    "pharmacode": BarcodeSymbology.PHARMACODE,
}


def parse_symbology(value: Union[str, BarcodeSymbology]) -> BarcodeSymbology:
    if isinstance(value, BarcodeSymbology):
        return value
    raw = (value or "").strip()
    if raw.lower() in _TEMPLATE_ALIASES:
        return _TEMPLATE_ALIASES[raw.lower()]
    try:
        return BarcodeSymbology(raw.upper())
    except ValueError:
        raise ValidationError(f"Unknown barcode symbology: {value!r}")


def normalize_code(code: str, symbology: BarcodeSymbology) -> str:
    """Strip the scanned code and check it against the rules of its symbology."""
    code = (code or "").strip()
    if not code:
        raise ValidationError("Barcode code is required")
    if len(code) > MAX_CODE_LENGTH:
        raise ValidationError(f"Barcode code is longer than {MAX_CODE_LENGTH} characters")

    if symbology in _DIGIT_LENGTHS:
        length, message = _DIGIT_LENGTHS[symbology]
        if len(code) != length or not code.isdigit():
            raise ValidationError(message)
    elif symbology is BarcodeSymbology.CODE39:
        if not _CODE39.match(code.upper()):
            raise ValidationError("Code 39 can only contain letters, numbers, and -.$/+ %")
    elif symbology is BarcodeSymbology.CODABAR:
        if not _CODABAR.match(code.upper()):
            raise ValidationError("Codabar must start and end with A-D, contain valid characters")
    elif symbology is BarcodeSymbology.MSI:
        if not _DIGITS.match(code):
            raise ValidationError("MSI can only contain digits")
    elif symbology is BarcodeSymbology.PHARMACODE:
        if not _DIGITS.match(code) or not (PHARMACODE_MIN <= int(code) <= PHARMACODE_MAX):
            raise ValidationError(
                f"Pharmacode must be a number between {PHARMACODE_MIN} and {PHARMACODE_MAX}"
            )
    return code
