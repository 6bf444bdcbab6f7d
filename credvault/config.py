"""
Configuration constants for the CredVault application.
"""

import string

# Application Metadata
APP_VERSION = "1.0"  # Use: Current version of the application. Type: str. Range: Semantic versioning string (e.g., "1.0.0")
APP_NAME = "CredVault"  # Use: Full name of the application. Type: str. Range: Any valid string.
APP_TITLE_PREFIX = f"{APP_NAME} v{APP_VERSION}"  # Use: Prefix for the application window titles, combining name and version. Type: str (f-string). Range: Derived from APP_NAME and APP_VERSION.

# Security Settings
SALT_SIZE = 16  # Use: Size of the per-entry salt in bytes for key derivation. Type: int. Range: At least 16 bytes (128 bits); argon2 rejects fewer than 8.
KEY_SIZE = 32  # Use: Size of the derived encryption key in bytes, requested directly from Argon2id. Corresponds to AES-256. Type: int. Range: 32.
NONCE_SIZE = 12  # Use: Size of the Nonce (Number used once) in bytes for AES-GCM. Type: int. Range: 12 bytes (96 bits) is the recommended size for GCM.
TAG_SIZE = 16  # Use: Size of the authentication tag in bytes for AES-GCM. Type: int. Range: 16 bytes (128 bits).
ARGON2_TIME_COST = 2  # Use: Argon2id time cost parameter. Controls the number of iterations. Type: int. Range: Typically 1 to 10. Higher values increase security but also computation time.
ARGON2_MEMORY_COST = 65536  # Use: Argon2id memory cost parameter in KiB. Type: int. Range: At least 8 * ARGON2_PARALLELISM; 65536 (64 MB) recommended.
ARGON2_PARALLELISM = 4  # Use: Argon2id parallelism parameter. Controls the number of lanes. Type: int. Range: Typically 1 to 8.
TOKEN_DELIMITER = ":"  # Use: Separator between the base-64 salt, nonce and ciphertext segments of an encrypted field token. Type: str. Range: A single character outside the base-64 alphabet.
VAULT_SALT_PLACEHOLDER = ""  # Use: Value written to the reserved vault-level salt field. Each entry carries its own salt instead. Type: str. Range: "".

# Password Generator Settings
PASSWORD_GENERATOR_DEFAULT_LENGTH = 16  # Use: Default length for generated passwords. Type: int. Range: PASSWORD_GENERATOR_MIN_LENGTH to PASSWORD_GENERATOR_MAX_LENGTH.
PASSWORD_GENERATOR_MIN_LENGTH = 4  # Use: Minimum length offered by the generator dialog. Type: int. Range: Positive integer.
PASSWORD_GENERATOR_MAX_LENGTH = 128  # Use: Maximum length offered by the generator dialog. Type: int. Range: Positive integer.
PASSWORD_GENERATOR_UPPERCASE = string.ascii_uppercase  # Use: Uppercase character class. Type: str. Range: "A-Z".
PASSWORD_GENERATOR_LOWERCASE = string.ascii_lowercase  # Use: Lowercase character class, also the fallback when no class is selected. Type: str. Range: "a-z".
PASSWORD_GENERATOR_DIGITS = string.digits  # Use: Digit character class. Type: str. Range: "0-9".
PASSWORD_GENERATOR_SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"  # Use: Symbol character class. Type: str. Range: Any string of printable punctuation.
PASSWORD_GENERATOR_AMBIGUOUS_CHARS = "0O1lI"  # Use: Characters considered ambiguous and can be excluded from generated passwords. Type: str. Range: Any string of characters.

# UI Settings
AUTO_LOCK_TIMEOUT_DEFAULT_MINUTES = 5  # Use: Inactivity timeout in minutes before the session is cleared. Type: int. Range: 0 (disabled) to 60.
CLIPBOARD_CLEAR_TIMEOUT_DEFAULT_SECONDS = 30  # Use: Timeout in seconds after which copied passwords are cleared from the clipboard. Type: int. Range: 10 to 300.
AUTO_LOCK_TIMEOUT_DEFAULT = AUTO_LOCK_TIMEOUT_DEFAULT_MINUTES * 60 * 1000  # Use: Auto-lock timeout in milliseconds. Derived from AUTO_LOCK_TIMEOUT_DEFAULT_MINUTES. Type: int. Range: Derived value.
CLIPBOARD_CLEAR_TIMEOUT_DEFAULT = CLIPBOARD_CLEAR_TIMEOUT_DEFAULT_SECONDS * 1000  # Use: Clipboard clear timeout in milliseconds. Derived from CLIPBOARD_CLEAR_TIMEOUT_DEFAULT_SECONDS. Type: int. Range: Derived value.
TABLE_PASSWORD_HIDDEN_TEXT = "••••••••"  # Use: Placeholder text displayed in the entries table for encrypted passwords. Type: str. Range: Any string.
APP_STYLE = 'Fusion'  # Use: PyQt5 application style. Type: str. Range: Valid PyQt5 style names (e.g., 'Fusion', 'Windows', 'Macintosh').

# File and Directory Names
CONFIG_DIR_NAME = ".credvault"  # Use: Name of the hidden directory within the user's home directory where CredVault stores its data files. Type: str. Range: Any valid directory name.
DEFAULT_VAULT_FILE = "vault.json"  # Use: Default filename for the vault. Type: str. Range: Any valid filename.
LOG_DIR_NAME = "logs"  # Use: Subdirectory of CONFIG_DIR_NAME holding the audit log. Type: str. Range: Any valid directory name.
AUDIT_LOG_FILE = "audit.log"  # Use: Filename for the security audit log. Type: str. Range: Any valid filename.
LOCK_FILE_SUFFIX = ".lock"  # Use: Suffix of the sidecar file used for cross-process write locking of the vault. Type: str. Range: Any valid filename suffix.

# Application State Machine States
STATE_LOGIN = "LOGIN"  # Use: Represents the unlock dialog state. Type: str. Range: Any string.
STATE_MAIN_WINDOW = "MAIN_WINDOW"  # Use: Represents the main window state. Type: str. Range: Any string.
STATE_EXIT = "EXIT"  # Use: Represents the application's exit state. Type: str. Range: Any string.
