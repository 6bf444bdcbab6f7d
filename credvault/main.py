"""
Main entry point for the CredVault credential vault.
"""

import sys
import signal
import logging
from typing import Optional
from PyQt5.QtWidgets import QApplication
from PyQt5.QtCore import Qt

from .ui import MainWindow, UnlockDialog
from .storage import VaultStore
from .vault import VaultService, VaultSession
from .utils import get_default_vault_path
from . import config

logger = logging.getLogger(__name__)


class CredVaultApp:
    """Main application class: unlock, main window, repeat until exit."""

    def __init__(self, vault_path: Optional[str] = None):
        """Initialize the application."""
        self.app = QApplication(sys.argv)
        self.app.setApplicationName(config.APP_NAME)
        self.app.setOrganizationName(config.APP_NAME)
        self.app.setStyle(config.APP_STYLE)
        self.app.setQuitOnLastWindowClosed(False)

        self.storage_path = vault_path or get_default_vault_path()
        self.service = VaultService(VaultStore(self.storage_path))
        self.session: Optional[VaultSession] = None
        self.main_window: Optional[MainWindow] = None
        self.relock_requested = False

        # Handle Ctrl+C gracefully
        signal.signal(signal.SIGINT, signal.SIG_DFL)

    def _handle_locked(self):
        self.relock_requested = True

    def run(self) -> int:
        """Run the application."""
        logger.info(f"Using vault file {self.storage_path}")
        current_state = config.STATE_LOGIN

        while current_state != config.STATE_EXIT:
            if current_state == config.STATE_LOGIN:
                dialog = UnlockDialog(self.service)
                if dialog.exec_():
                    self.session = dialog.session
                    current_state = config.STATE_MAIN_WINDOW
                else:
                    current_state = config.STATE_EXIT

            elif current_state == config.STATE_MAIN_WINDOW:
                self.relock_requested = False
                self.main_window = MainWindow(self.service, self.session)
                self.main_window.locked.connect(self._handle_locked)
                self.main_window.destroyed.connect(self.app.quit)
                self.main_window.setAttribute(Qt.WA_DeleteOnClose)
                self.main_window.show()
                self.app.exec_()
                self.main_window = None
                self.session = None
                current_state = config.STATE_LOGIN if self.relock_requested else config.STATE_EXIT

        return 0

    def cleanup(self):
        """Clean up resources."""
        if self.session is not None:
            self.session.clear()


def main():
    """Main entry point."""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(name)s - %(message)s')
    if hasattr(Qt, 'AA_EnableHighDpiScaling'):
        QApplication.setAttribute(Qt.AA_EnableHighDpiScaling, True)
    if hasattr(Qt, 'AA_UseHighDpiPixmaps'):
        QApplication.setAttribute(Qt.AA_UseHighDpiPixmaps, True)

    app = CredVaultApp(sys.argv[1] if len(sys.argv) > 1 else None)
    try:
        return app.run()
    finally:
        app.cleanup()


if __name__ == "__main__":
    sys.exit(main())
