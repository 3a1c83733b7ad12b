"""
Local license key generation.
"""

import secrets

KEY_GROUPS = 5
GROUP_LENGTH = 5


def generate_license_key() -> str:
    """
    Generate a license key in format: XXXXX-XXXXX-XXXXX-XXXXX-XXXXX.

    Each group holds uppercase hexadecimal characters.

    Returns:
        Generated license key string
    """
    parts = [secrets.token_hex(GROUP_LENGTH).upper()[:GROUP_LENGTH] for _ in range(KEY_GROUPS)]
    return "-".join(parts)
