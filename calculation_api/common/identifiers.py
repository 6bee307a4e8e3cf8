"""Identifier format checks."""

ID_LENGTH = 36
ID_HYPHENS = 4


def is_valid_id(calculation_id: str) -> bool:
    """
    Check that an identifier has the textual shape of a UUID.

    Only the length and the number of hyphens are checked; hyphen positions
    and hex digits are not.

    :param str calculation_id: Identifier to check

    :return: True if the identifier is 36 characters long with exactly 4 hyphens
    :rtype: bool
    """
    return len(calculation_id) == ID_LENGTH and calculation_id.count("-") == ID_HYPHENS
