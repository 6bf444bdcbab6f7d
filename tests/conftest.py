import pytest

from credvault.crypto import CryptoManager
from credvault.storage import VaultStore
from credvault.vault import VaultService


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep ~/.credvault (audit log, default vault) inside the test's tmp dir."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


@pytest.fixture
def crypto():
    """Argon2id at its minimum cost so tests stay fast."""
    return CryptoManager(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def vault_path(tmp_path):
    return str(tmp_path / "vault.json")


@pytest.fixture
def store(vault_path):
    return VaultStore(vault_path)


@pytest.fixture
def audit_dir(tmp_path):
    return str(tmp_path / "audit")


@pytest.fixture
def service(store, crypto, audit_dir):
    return VaultService(store, crypto=crypto, audit_dir=audit_dir)
