import platform
import os
import stat
import logging

from . import config

logger = logging.getLogger(__name__)

if platform.system() == "Windows":
    try:
        import win32security
        import win32api
        import win32con
        WINDOWS_SECURITY_AVAILABLE = True
    except ImportError:
        logger.warning("pywin32 not fully installed, cannot set Windows file permissions securely.")
        WINDOWS_SECURITY_AVAILABLE = False
else:
    WINDOWS_SECURITY_AVAILABLE = False


def get_app_dir() -> str:
    """Return ~/.credvault, creating it if needed."""
    app_dir = os.path.join(os.path.expanduser("~"), config.CONFIG_DIR_NAME)
    os.makedirs(app_dir, exist_ok=True)
    return app_dir


def get_default_vault_path() -> str:
    """Get the default path for the vault file."""
    return os.path.join(get_app_dir(), config.DEFAULT_VAULT_FILE)


def set_owner_only_permissions(filepath: str) -> bool:
    """
    Restrict a file to its owner. Returns False if the restriction could not
    be applied; the file itself is left untouched either way.
    """
    if platform.system() != "Windows":
        os.chmod(filepath, stat.S_IRUSR | stat.S_IWUSR)  # 600
        return True
    return _set_windows_owner_only(filepath)


def _set_windows_owner_only(filepath: str) -> bool:
    if not WINDOWS_SECURITY_AVAILABLE:
        logger.warning(f"Skipping Windows file permission setting for {filepath}: pywin32 not available.")
        return False

    try:
        user_sid, _, _ = win32security.LookupAccountName(None, win32api.GetUserName())
        dacl = win32security.ACL()
        dacl.AddAccessAllowedAce(
            win32security.ACL_REVISION,
            win32con.GENERIC_READ | win32con.GENERIC_WRITE,
            user_sid
        )
        win32security.SetNamedSecurityInfo(
            filepath,
            win32security.SE_FILE_OBJECT,
            win32security.DACL_SECURITY_INFORMATION | win32security.PROTECTED_DACL_SECURITY_INFORMATION,
            None,
            None,
            dacl,
            None
        )
    except win32api.error as e:
        logger.error(f"Failed to set Windows file permissions for {filepath}: {e}")
        return False
    return True
