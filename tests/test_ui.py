# Tests for the Qt layer that does not need a visible display
#
# Coverage:
#   - CryptoWorker reports unexpected exceptions through `failed`
#   - Error text shown to the user for vault, auth and unexpected errors
#   - Results of decrypt workers are dropped once the window is locked

import os
import threading

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PyQt5.QtWidgets")

from credvault import ui
from credvault.errors import AuthenticationError, PersistenceError


@pytest.fixture(scope="module")
def qapp():
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])


@pytest.fixture
def window(qapp, service):
    service.add_entry("mail", "alice", "p@ss1234", "master")
    session = service.unlock("master")
    win = ui.MainWindow(service, session)
    yield win
    win.close()
    session.clear()


@pytest.fixture
def message_boxes(monkeypatch):
    shown = []
    monkeypatch.setattr(ui.QMessageBox, "information", lambda *args: shown.append(args))
    monkeypatch.setattr(ui.QMessageBox, "warning", lambda *args: shown.append(args))
    return shown


def test_worker_reports_unexpected_exception(qapp):
    def broken():
        raise RuntimeError("boom")

    worker = ui.CryptoWorker(broken)
    failures, results = [], []
    worker.failed.connect(failures.append)
    worker.succeeded.connect(results.append)

    worker.run()

    assert results == []
    assert len(failures) == 1
    assert isinstance(failures[0], RuntimeError)


def test_worker_reports_result(qapp):
    worker = ui.CryptoWorker(lambda a, b: a + b, 2, 3)
    results = []
    worker.succeeded.connect(results.append)
    worker.run()
    assert results == [5]


def test_error_text():
    assert ui._error_text(AuthenticationError()) == AuthenticationError.MESSAGE
    assert ui._error_text(PersistenceError("disk full")) == "disk full"
    assert ui._error_text(ValueError("Service name is required")) == "Service name is required"
    assert ui._error_text(RuntimeError("internal detail")) == ui.UNEXPECTED_ERROR_MESSAGE


def test_results_after_lock_are_dropped(window, message_boxes):
    entry = window.session.list_entries()[0]
    clipboard = QtWidgets.QApplication.clipboard()
    clipboard.setText("before")

    window.session.clear()
    window._show_password(entry, "p@ss1234")
    window._set_clipboard_password("p@ss1234")
    window._handle_entry_added(entry.id)
    window._handle_error(AuthenticationError())

    assert message_boxes == []
    assert clipboard.text() == "before"
    assert not window.clipboard_timer.isActive()


def test_lock_discards_pending_reveal(qapp, window, message_boxes):
    entry = window.session.list_entries()[0]
    clipboard = QtWidgets.QApplication.clipboard()
    clipboard.setText("before")
    release = threading.Event()

    def slow_reveal(e):
        release.wait(5)
        return "p@ss1234"

    window._run(slow_reveal, entry, on_success=window._set_clipboard_password, message="Decrypting...")
    release.set()
    window.lock()
    qapp.processEvents()

    assert not window.session.is_active
    assert window.workers == []
    assert clipboard.text() == "before"
    assert message_boxes == []
