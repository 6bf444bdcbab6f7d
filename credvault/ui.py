"""
User interface for the CredVault credential vault.

Every call that derives a key runs on a CryptoWorker thread so the Qt event
loop stays responsive while Argon2id works.
"""

import os
import datetime
import logging
from typing import Optional, List, Callable, Any
from PyQt5.QtWidgets import (
    QMainWindow, QDialog, QWidget, QVBoxLayout, QHBoxLayout, QGridLayout,
    QLabel, QLineEdit, QPushButton, QTableWidget, QTableWidgetItem,
    QMessageBox, QGroupBox, QCheckBox, QSpinBox, QDialogButtonBox, QMenu,
    QFormLayout, QApplication
)
from PyQt5.QtCore import Qt, QTimer, QEvent, pyqtSignal, QThread
from PyQt5.QtGui import QFont

from .vault import VaultService, VaultSession
from .storage import VaultEntry
from .errors import AuthenticationError, VaultError
from .generator import generate_password
from . import config

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Unexpected error, see the application log for details"


class CryptoWorker(QThread):
    """Runs one blocking vault call off the GUI thread."""

    succeeded = pyqtSignal(object)
    failed = pyqtSignal(object)

    def __init__(self, func: Callable[..., Any], *args):
        super().__init__()
        self.func = func
        self.args = args

    def run(self):
        try:
            self.succeeded.emit(self.func(*self.args))
        except (VaultError, ValueError) as e:
            self.failed.emit(e)
        except Exception as e:
            logger.exception(f"Unexpected error in vault worker: {e}")
            self.failed.emit(e)


def _error_text(error: Exception) -> str:
    if isinstance(error, AuthenticationError):
        return AuthenticationError.MESSAGE
    if isinstance(error, (VaultError, ValueError)):
        return str(error)
    return UNEXPECTED_ERROR_MESSAGE


class UnlockDialog(QDialog):
    """Asks for the master password and opens a session."""

    def __init__(self, service: VaultService, parent=None):
        super().__init__(parent)
        self.service = service
        self.session: Optional[VaultSession] = None
        self.worker: Optional[CryptoWorker] = None
        self.init_ui()

    def init_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle(f"{config.APP_TITLE_PREFIX} - Unlock")
        self.setModal(True)

        layout = QVBoxLayout()

        entries = self.service.list_entries()
        if entries:
            hint = f"Enter the master password for {os.path.basename(self.service.store.filepath)}."
        else:
            hint = "This vault is empty. The master password you enter will protect new entries."
        hint_label = QLabel(hint)
        hint_label.setWordWrap(True)
        layout.addWidget(hint_label)

        self.password_input = QLineEdit()
        self.password_input.setEchoMode(QLineEdit.Password)
        self.password_input.setPlaceholderText("Master Password")
        self.password_input.returnPressed.connect(self.unlock)
        layout.addWidget(self.password_input)

        self.status_label = QLabel("")
        layout.addWidget(self.status_label)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.button(QDialogButtonBox.Ok).setText("Unlock")
        buttons.accepted.connect(self.unlock)
        buttons.rejected.connect(self.reject)
        self.buttons = buttons
        layout.addWidget(buttons)

        self.setLayout(layout)

    def unlock(self):
        """Verify the master password on a worker thread."""
        password = self.password_input.text()
        if not password:
            self.status_label.setText("Master password is required")
            return

        self.buttons.setEnabled(False)
        self.password_input.setEnabled(False)
        self.status_label.setText("Unlocking...")

        self.worker = CryptoWorker(self.service.unlock, password)
        self.worker.succeeded.connect(self._handle_unlocked)
        self.worker.failed.connect(self._handle_unlock_failed)
        self.worker.start()

    def _handle_unlocked(self, session: VaultSession):
        self.session = session
        self.password_input.clear()
        self.accept()

    def _handle_unlock_failed(self, error: Exception):
        self.buttons.setEnabled(True)
        self.password_input.setEnabled(True)
        self.password_input.selectAll()
        self.status_label.setText(_error_text(error))


class PasswordGeneratorDialog(QDialog):
    """Dialog for generating passwords."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.generated_password = ""
        self.init_ui()

    def init_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle("Password Generator")
        self.setModal(True)

        layout = QVBoxLayout()

        options_group = QGroupBox("Options")
        options_layout = QGridLayout()

        options_layout.addWidget(QLabel("Length:"), 0, 0)
        self.length_spin = QSpinBox()
        self.length_spin.setMinimum(config.PASSWORD_GENERATOR_MIN_LENGTH)
        self.length_spin.setMaximum(config.PASSWORD_GENERATOR_MAX_LENGTH)
        self.length_spin.setValue(config.PASSWORD_GENERATOR_DEFAULT_LENGTH)
        self.length_spin.valueChanged.connect(self.generate_password)
        options_layout.addWidget(self.length_spin, 0, 1)

        self.class_checks = []
        for row, col, text in ((1, 0, "Uppercase (A-Z)"), (1, 1, "Lowercase (a-z)"),
                               (2, 0, "Digits (0-9)"), (2, 1, "Symbols (!@#$...)")):
            check = QCheckBox(text)
            check.setChecked(True)
            check.toggled.connect(self.generate_password)
            options_layout.addWidget(check, row, col)
            self.class_checks.append(check)

        self.exclude_ambiguous_check = QCheckBox(f"Exclude ambiguous ({config.PASSWORD_GENERATOR_AMBIGUOUS_CHARS})")
        self.exclude_ambiguous_check.toggled.connect(self.generate_password)
        options_layout.addWidget(self.exclude_ambiguous_check, 3, 0, 1, 2)

        options_group.setLayout(options_layout)
        layout.addWidget(options_group)

        password_group = QGroupBox("Generated Password")
        password_layout = QVBoxLayout()

        self.password_display = QLineEdit()
        self.password_display.setReadOnly(True)
        self.password_display.setFont(QFont("Consolas", 12))
        password_layout.addWidget(self.password_display)

        button_layout = QHBoxLayout()
        self.regenerate_button = QPushButton("Regenerate")
        self.regenerate_button.clicked.connect(self.generate_password)
        button_layout.addWidget(self.regenerate_button)

        self.copy_button = QPushButton("Copy to Clipboard")
        self.copy_button.clicked.connect(self.copy_password)
        button_layout.addWidget(self.copy_button)

        password_layout.addLayout(button_layout)
        password_group.setLayout(password_layout)
        layout.addWidget(password_group)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self.setLayout(layout)
        self.generate_password()

    def generate_password(self):
        """Generate a new password based on selected options."""
        upper, lower, digits, symbols = (c.isChecked() for c in self.class_checks)
        self.generated_password = generate_password(
            self.length_spin.value(),
            use_upper=upper,
            use_lower=lower,
            use_digits=digits,
            use_symbols=symbols,
            exclude_ambiguous=self.exclude_ambiguous_check.isChecked(),
        )
        self.password_display.setText(self.generated_password)

    def copy_password(self):
        """Copy generated password to clipboard."""
        QApplication.clipboard().setText(self.generated_password)
        self.copy_button.setText("Copied!")
        QTimer.singleShot(1000, lambda: self.copy_button.setText("Copy to Clipboard"))

    def get_password(self) -> str:
        return self.generated_password


class EntryDialog(QDialog):
    """Dialog for adding a credential."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.init_ui()

    def init_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle("Add Entry")
        self.setModal(True)

        layout = QVBoxLayout()
        form = QFormLayout()

        self.service_input = QLineEdit()
        form.addRow("Service:", self.service_input)

        self.username_input = QLineEdit()
        form.addRow("Username:", self.username_input)

        password_layout = QHBoxLayout()
        self.password_input = QLineEdit()
        self.password_input.setEchoMode(QLineEdit.Password)
        password_layout.addWidget(self.password_input)

        self.show_password_check = QCheckBox("Show")
        self.show_password_check.toggled.connect(self.toggle_password_visibility)
        password_layout.addWidget(self.show_password_check)

        generate_button = QPushButton("Generate")
        generate_button.clicked.connect(self.generate_password)
        password_layout.addWidget(generate_button)
        form.addRow("Password:", password_layout)

        layout.addLayout(form)

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.validate_and_accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self.setLayout(layout)

    def toggle_password_visibility(self, checked: bool):
        self.password_input.setEchoMode(QLineEdit.Normal if checked else QLineEdit.Password)

    def generate_password(self):
        dialog = PasswordGeneratorDialog(self)
        if dialog.exec_():
            self.password_input.setText(dialog.get_password())

    def validate_and_accept(self):
        if not self.service_input.text().strip():
            QMessageBox.warning(self, "Missing Service", "Please enter a service name.")
            return
        if not self.password_input.text():
            QMessageBox.warning(self, "Missing Password", "Please enter a password.")
            return
        self.accept()

    def get_values(self):
        """Return (service, username, password)."""
        return (self.service_input.text().strip(), self.username_input.text().strip(),
                self.password_input.text())


class MainWindow(QMainWindow):
    """Main application window."""
    locked = pyqtSignal()

    COLUMNS = ["Service", "Username", "Password", "Created"]

    def __init__(self, service: VaultService, session: VaultSession):
        super().__init__()
        self.service = service
        self.session = session
        self.workers: List[CryptoWorker] = []
        self.clipboard_timer = QTimer()
        self.clipboard_timer.setSingleShot(True)
        self.clipboard_timer.timeout.connect(self.clear_clipboard)
        self.auto_lock_timer = QTimer()
        self.auto_lock_timer.setSingleShot(True)
        self.auto_lock_timer.timeout.connect(self.lock)
        self.init_ui()
        self.load_entries()
        self.auto_lock_timer.start(config.AUTO_LOCK_TIMEOUT_DEFAULT)

    def init_ui(self):
        """Initialize the user interface."""
        self.setWindowTitle(f"{config.APP_TITLE_PREFIX} - {os.path.basename(self.service.store.filepath)}")
        self.setGeometry(100, 100, 900, 500)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout()
        central_widget.setLayout(layout)

        toolbar_layout = QHBoxLayout()

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search entries...")
        self.search_input.textChanged.connect(self.filter_entries)
        toolbar_layout.addWidget(self.search_input)

        self.add_button = QPushButton("Add Entry")
        self.add_button.clicked.connect(self.add_entry)
        toolbar_layout.addWidget(self.add_button)

        self.generator_button = QPushButton("Generator")
        self.generator_button.clicked.connect(self.show_generator)
        toolbar_layout.addWidget(self.generator_button)

        self.lock_button = QPushButton("Lock")
        self.lock_button.clicked.connect(self.lock)
        toolbar_layout.addWidget(self.lock_button)

        layout.addLayout(toolbar_layout)

        self.table = QTableWidget()
        self.table.setColumnCount(len(self.COLUMNS))
        self.table.setHorizontalHeaderLabels(self.COLUMNS)
        self.table.setAlternatingRowColors(True)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.setColumnWidth(0, 220)
        self.table.setColumnWidth(1, 220)
        self.table.setColumnWidth(2, 180)
        self.table.setContextMenuPolicy(Qt.CustomContextMenu)
        self.table.customContextMenuRequested.connect(self.show_context_menu)
        self.table.doubleClicked.connect(lambda index: self.reveal_password(self._entry_at(index.row())))
        layout.addWidget(self.table)

        self.statusBar().showMessage("Vault unlocked")
        self.count_label = QLabel("Total Entries: 0")
        self.count_label.setStyleSheet("padding-right: 10px;")
        self.statusBar().addPermanentWidget(self.count_label)

        QApplication.instance().installEventFilter(self)

    def eventFilter(self, obj, event):
        """Restart the auto-lock countdown on user input."""
        if event.type() in (QEvent.KeyPress, QEvent.MouseButtonPress) and self.session.is_active:
            self.auto_lock_timer.start(config.AUTO_LOCK_TIMEOUT_DEFAULT)
        return super().eventFilter(obj, event)

    def load_entries(self):
        """Load entries into the table."""
        self.table.setRowCount(0)
        for entry in self.session.list_entries():
            self.add_entry_to_table(entry)
        self.filter_entries()
        self.count_label.setText(f"Total Entries: {self.table.rowCount()}")

    def add_entry_to_table(self, entry: VaultEntry):
        row = self.table.rowCount()
        self.table.insertRow(row)

        service_item = QTableWidgetItem(entry.service)
        service_item.setData(Qt.UserRole, entry)
        self.table.setItem(row, 0, service_item)
        self.table.setItem(row, 1, QTableWidgetItem(entry.username))
        self.table.setItem(row, 2, QTableWidgetItem(config.TABLE_PASSWORD_HIDDEN_TEXT))

        try:
            date_str = datetime.datetime.fromisoformat(entry.created_at).strftime("%Y-%m-%d %H:%M")
        except ValueError:
            date_str = entry.created_at
        self.table.setItem(row, 3, QTableWidgetItem(date_str))

    def _entry_at(self, row: int) -> Optional[VaultEntry]:
        item = self.table.item(row, 0)
        return item.data(Qt.UserRole) if item else None

    def filter_entries(self):
        """Filter entries based on search text."""
        search_text = self.search_input.text().lower()
        for row in range(self.table.rowCount()):
            service = self.table.item(row, 0).text().lower()
            username = self.table.item(row, 1).text().lower()
            show = not search_text or search_text in service or search_text in username
            self.table.setRowHidden(row, not show)

    def show_context_menu(self, position):
        item = self.table.itemAt(position)
        if not item:
            return
        entry = self._entry_at(item.row())

        menu = QMenu()
        copy_user_action = menu.addAction("Copy Username")
        copy_pass_action = menu.addAction("Copy Password")
        reveal_action = menu.addAction("Reveal Password")

        action = menu.exec_(self.table.mapToGlobal(position))
        if action == copy_user_action:
            QApplication.clipboard().setText(entry.username)
            self.statusBar().showMessage("Username copied to clipboard", 2000)
        elif action == copy_pass_action:
            self.copy_password(entry)
        elif action == reveal_action:
            self.reveal_password(entry)

    def _run(self, func: Callable[..., Any], *args, on_success: Callable[[Any], None],
             message: str):
        worker = CryptoWorker(func, *args)
        self.workers.append(worker)
        worker.succeeded.connect(on_success)
        worker.failed.connect(self._handle_error)
        worker.finished.connect(lambda: self._forget_worker(worker))
        self.statusBar().showMessage(message)
        worker.start()

    def _forget_worker(self, worker: CryptoWorker):
        if worker in self.workers:
            self.workers.remove(worker)

    def _stop_workers(self):
        """Drop pending results and wait for running workers to finish."""
        for worker in list(self.workers):
            for signal in (worker.succeeded, worker.failed):
                try:
                    signal.disconnect()
                except TypeError:
                    pass  # nothing connected
            worker.wait()
        self.workers.clear()

    def _handle_error(self, error: Exception):
        if not self.session.is_active:
            return
        self.statusBar().clearMessage()
        QMessageBox.warning(self, "Vault Error", _error_text(error))

    def add_entry(self):
        """Add a new entry."""
        dialog = EntryDialog(self)
        if dialog.exec_():
            service, username, password = dialog.get_values()
            self._run(self.session.add_entry, service, username, password,
                      on_success=self._handle_entry_added, message="Encrypting entry...")

    def _handle_entry_added(self, entry_id: str):
        if not self.session.is_active:
            return
        self.load_entries()
        self.statusBar().showMessage("Entry added", 2000)

    def reveal_password(self, entry: Optional[VaultEntry]):
        if entry is None:
            return
        self._run(self.session.reveal_password, entry,
                  on_success=lambda password: self._show_password(entry, password),
                  message="Decrypting...")

    def _show_password(self, entry: VaultEntry, password: str):
        # Results queued before a lock must not surface afterwards.
        if not self.session.is_active:
            return
        self.statusBar().clearMessage()
        QMessageBox.information(self, entry.service, f"Password for {entry.username or entry.service}:\n\n{password}")

    def copy_password(self, entry: VaultEntry):
        """Copy password to clipboard with auto-clear."""
        self._run(self.session.reveal_password, entry,
                  on_success=self._set_clipboard_password, message="Decrypting...")

    def _set_clipboard_password(self, password: str):
        if not self.session.is_active:
            return
        QApplication.clipboard().setText(password)
        self.clipboard_timer.start(config.CLIPBOARD_CLEAR_TIMEOUT_DEFAULT)
        self.statusBar().showMessage(
            f"Password copied to clipboard (auto-clear in {config.CLIPBOARD_CLEAR_TIMEOUT_DEFAULT_SECONDS}s)", 2000
        )

    def clear_clipboard(self):
        QApplication.clipboard().clear()
        self.statusBar().showMessage("Clipboard cleared", 2000)

    def show_generator(self):
        dialog = PasswordGeneratorDialog(self)
        dialog.exec_()

    def lock(self):
        """Clear the session and close the window."""
        if not self.session.is_active:
            return
        self._stop_workers()
        self.session.clear()
        logger.info("Vault locked")
        self.close()

    def closeEvent(self, event):
        """Handle window close event."""
        self.auto_lock_timer.stop()
        QApplication.instance().removeEventFilter(self)
        if self.clipboard_timer.isActive():
            self.clipboard_timer.stop()
            self.clear_clipboard()
        was_locking = not self.session.is_active
        self._stop_workers()
        self.session.clear()
        if was_locking:
            self.locked.emit()
        event.accept()
