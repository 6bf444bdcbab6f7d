"""
Random password generation.
"""

import secrets

from . import config


def build_charset(use_upper: bool = True, use_lower: bool = True, use_digits: bool = True,
                  use_symbols: bool = True, exclude_ambiguous: bool = False) -> str:
    """Character set for the selected classes; lowercase only if none is selected."""
    chars = ""
    if use_upper:
        chars += config.PASSWORD_GENERATOR_UPPERCASE
    if use_lower:
        chars += config.PASSWORD_GENERATOR_LOWERCASE
    if use_digits:
        chars += config.PASSWORD_GENERATOR_DIGITS
    if use_symbols:
        chars += config.PASSWORD_GENERATOR_SYMBOLS

    if not chars:
        chars = config.PASSWORD_GENERATOR_LOWERCASE

    if exclude_ambiguous:
        ambiguous = config.PASSWORD_GENERATOR_AMBIGUOUS_CHARS
        chars = ''.join(c for c in chars if c not in ambiguous)
    return chars


def generate_password(length: int = config.PASSWORD_GENERATOR_DEFAULT_LENGTH,
                      use_upper: bool = True, use_lower: bool = True, use_digits: bool = True,
                      use_symbols: bool = True, exclude_ambiguous: bool = False) -> str:
    """
    Generate a password using the secrets module.

    Args:
        length: Number of characters, 0 gives an empty string
        use_upper: Include A-Z
        use_lower: Include a-z
        use_digits: Include 0-9
        use_symbols: Include punctuation from config.PASSWORD_GENERATOR_SYMBOLS
        exclude_ambiguous: Drop characters listed in config.PASSWORD_GENERATOR_AMBIGUOUS_CHARS

    Raises:
        ValueError: If length is negative
    """
    if length < 0:
        raise ValueError("Password length cannot be negative")
    chars = build_charset(use_upper, use_lower, use_digits, use_symbols, exclude_ambiguous)
    return ''.join(secrets.choice(chars) for _ in range(length))
