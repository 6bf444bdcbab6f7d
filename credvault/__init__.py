"""
CredVault Credential Vault
Copyright (c) 2025

THREAT MODEL:
This tool stores credentials for the user of the device it runs on. Passwords
are encrypted individually with a key derived from a master password that is
never written to disk. Anyone holding the vault file alone learns service
names and usernames, but not passwords.
"""

__version__ = "1.0.0"
