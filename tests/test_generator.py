import string

import pytest

from credvault import config
from credvault.generator import build_charset, generate_password


def test_no_classes_falls_back_to_lowercase():
    password = generate_password(40, use_upper=False, use_lower=False, use_digits=False, use_symbols=False)
    assert len(password) == 40
    assert set(password) <= set(string.ascii_lowercase)


@pytest.mark.parametrize("flags,allowed", [
    (dict(use_upper=True, use_lower=False, use_digits=False, use_symbols=False), string.ascii_uppercase),
    (dict(use_upper=False, use_lower=True, use_digits=False, use_symbols=False), string.ascii_lowercase),
    (dict(use_upper=False, use_lower=False, use_digits=True, use_symbols=False), string.digits),
    (dict(use_upper=False, use_lower=False, use_digits=False, use_symbols=True), config.PASSWORD_GENERATOR_SYMBOLS),
])
def test_single_class(flags, allowed):
    password = generate_password(64, **flags)
    assert len(password) == 64
    assert set(password) <= set(allowed)


def test_default_uses_all_classes():
    charset = build_charset()
    for chars in (string.ascii_uppercase, string.ascii_lowercase, string.digits, config.PASSWORD_GENERATOR_SYMBOLS):
        assert set(chars) <= set(charset)
    assert len(generate_password()) == config.PASSWORD_GENERATOR_DEFAULT_LENGTH


def test_exclude_ambiguous():
    password = generate_password(500, exclude_ambiguous=True)
    assert not set(password) & set(config.PASSWORD_GENERATOR_AMBIGUOUS_CHARS)


def test_zero_and_negative_length():
    assert generate_password(0) == ""
    with pytest.raises(ValueError):
        generate_password(-1)


def test_passwords_differ():
    assert generate_password(32) != generate_password(32)
