# Tests for the entry lifecycle and sessions
#
# Coverage:
#   - Add / list / reveal, including the GitHub/alice scenario
#   - Empty-vault bootstrap
#   - Wrong master password and tampered tokens
#   - Per-entry salt and nonce uniqueness
#   - encrypt_field / decrypt_field token operations
#   - Concurrent add_entry calls losing no entries
#   - Master password verification, sessions and the audit trail

import json
import threading

import pytest

from credvault import codec
from credvault.audit import get_audit_log_path
from credvault.errors import (
    AuthenticationError,
    DerivationError,
    FormatError,
    PersistenceError,
    VaultLockedError,
)
from credvault.storage import VaultStore
from credvault.vault import VaultService


def _flip(data: bytes, index: int) -> bytes:
    tampered = bytearray(data)
    tampered[index] ^= 0x01
    return bytes(tampered)


def test_github_scenario(service):
    entry_id = service.add_entry("GitHub", "alice", "p@ss1234", "correct-horse")

    entries = service.list_entries()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.id == entry_id
    assert entry.service == "GitHub"
    assert entry.username == "alice"
    assert entry.password_encrypted != "p@ss1234"
    assert entry.created_at

    assert service.reveal_password(entry, "correct-horse") == "p@ss1234"
    with pytest.raises(AuthenticationError):
        service.reveal_password(entry, "wrong-horse")


def test_plaintext_never_written(service, vault_path):
    service.add_entry("GitHub", "alice", "p@ss1234", "correct-horse")
    with open(vault_path, encoding="utf-8") as f:
        content = f.read()
    assert "p@ss1234" not in content
    assert "correct-horse" not in content


def test_empty_vault_bootstrap(service, vault_path):
    assert service.list_entries() == []
    assert service.get_entry("missing") is None


@pytest.mark.parametrize("password", ["p@ss1234", "", "ünïcødé 🔐", "x" * 1000])
def test_field_round_trip(service, password):
    assert service.decrypt_field(service.encrypt_field(password, "m"), "m") == password


def test_add_then_reveal_round_trip(service):
    passwords = ["one", "two", "thrée", "four:with:colons"]
    ids = [service.add_entry("svc", "user", p, "master") for p in passwords]

    for entry_id, password in zip(ids, passwords):
        assert service.reveal_password(service.get_entry(entry_id), "master") == password


def test_token_layout(service):
    token = service.encrypt_field("p@ss1234", "correct-horse")
    salt, nonce, ciphertext = codec.decode(token)
    assert len(salt) == 16
    assert len(nonce) == 12
    assert len(ciphertext) == len("p@ss1234") + 16


def test_insertion_order_and_unique_ids(service):
    ids = [service.add_entry(f"svc-{n}", "user", "pw", "master") for n in range(5)]
    entries = service.list_entries()
    assert [e.id for e in entries] == ids
    assert len(set(ids)) == 5
    assert [e.service for e in entries] == [f"svc-{n}" for n in range(5)]


def test_salts_and_nonces_are_unique(service):
    count = 64
    for _ in range(count):
        service.add_entry("svc", "user", "same password", "same master")

    parts = [codec.decode(e.password_encrypted) for e in service.list_entries()]
    assert len({salt for salt, _, _ in parts}) == count
    assert len({nonce for _, nonce, _ in parts}) == count


@pytest.mark.parametrize("segment", [0, 1, 2])
def test_tampered_persisted_token_is_rejected(service, store, segment):
    service.add_entry("GitHub", "alice", "p@ss1234", "correct-horse")
    vault = store.load()
    parts = list(codec.decode(vault.entries[0].password_encrypted))
    parts[segment] = _flip(parts[segment], len(parts[segment]) - 1)
    vault.entries[0].password_encrypted = codec.encode(*parts)
    store.save(vault)

    entry = service.list_entries()[0]
    with pytest.raises(AuthenticationError) as excinfo:
        service.reveal_password(entry, "correct-horse")
    assert str(excinfo.value) == "Wrong master password or corrupted entry"


def test_wrong_password_and_tampering_look_the_same(service):
    token = service.encrypt_field("secret", "correct-horse")
    salt, nonce, ciphertext = codec.decode(token)
    tampered = codec.encode(salt, nonce, _flip(ciphertext, 0))

    with pytest.raises(AuthenticationError) as wrong:
        service.decrypt_field(token, "wrong-horse")
    with pytest.raises(AuthenticationError) as corrupt:
        service.decrypt_field(tampered, "correct-horse")
    assert str(wrong.value) == str(corrupt.value)


def test_malformed_tokens(service):
    with pytest.raises(FormatError):
        service.decrypt_field("only:two", "m")
    with pytest.raises(DerivationError):
        service.decrypt_field(codec.encode(b"short", b"\x00" * 12, b"\x00" * 20), "m")


@pytest.mark.parametrize("args", [
    ("", "alice", "pw", "master"),
    ("GitHub", "alice", "", "master"),
    ("GitHub", "alice", "pw", ""),
])
def test_add_entry_validation(service, args):
    with pytest.raises(ValueError):
        service.add_entry(*args)
    assert service.list_entries() == []


def test_add_entry_refuses_to_overwrite_corrupt_vault(service, vault_path):
    with open(vault_path, "w", encoding="utf-8") as f:
        f.write("{corrupt")

    assert service.list_entries() == []
    with pytest.raises(PersistenceError):
        service.add_entry("GitHub", "alice", "pw", "master")
    with open(vault_path, encoding="utf-8") as f:
        assert f.read() == "{corrupt"


def test_concurrent_adds_lose_nothing(vault_path, crypto, audit_dir):
    errors = []

    def add(n: int):
        service = VaultService(VaultStore(vault_path), crypto=crypto, audit_dir=audit_dir)
        try:
            service.add_entry(f"svc-{n}", "user", f"pw-{n}", "master")
        except Exception as e:  # pragma: no cover - surfaced below
            errors.append(e)

    threads = [threading.Thread(target=add, args=(n,)) for n in range(12)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    with open(vault_path, encoding="utf-8") as f:
        data = json.load(f)
    assert sorted(e["service"] for e in data["entries"]) == sorted(f"svc-{n}" for n in range(12))


def test_verify_master_password(service):
    assert service.verify_master_password("anything") is True
    service.add_entry("GitHub", "alice", "pw", "correct-horse")
    assert service.verify_master_password("correct-horse") is True
    assert service.verify_master_password("wrong-horse") is False


def test_session_lifecycle(service):
    with pytest.raises(ValueError):
        service.unlock("")

    with service.unlock("correct-horse") as session:
        assert session.is_active
        session.add_entry("GitHub", "alice", "p@ss1234")
        entry = session.list_entries()[0]
        assert session.reveal_password(entry) == "p@ss1234"

    assert not session.is_active
    with pytest.raises(VaultLockedError):
        session.reveal_password(entry)
    with pytest.raises(VaultLockedError):
        session.add_entry("GitLab", "alice", "pw")
    with pytest.raises(RuntimeError):
        session.list_entries()


def test_unlock_with_wrong_password(service):
    service.add_entry("GitHub", "alice", "pw", "correct-horse")
    with pytest.raises(AuthenticationError):
        service.unlock("wrong-horse")


def test_sessions_are_independent(service):
    first = service.unlock("master")
    second = service.unlock("master")
    first.clear()
    assert not first.is_active
    assert second.is_active
    second.clear()


def test_audit_trail_has_no_secrets(service, audit_dir):
    entry_id = service.add_entry("GitHub", "alice", "p@ss1234", "correct-horse")
    entry = service.get_entry(entry_id)
    service.reveal_password(entry, "correct-horse")
    with pytest.raises(AuthenticationError):
        service.reveal_password(entry, "wrong-horse")

    with open(get_audit_log_path(audit_dir), encoding="utf-8") as f:
        lines = f.read().splitlines()

    actions = [line.split(" | ")[1] for line in lines]
    assert actions == ["ENTRY_ADDED", "PASSWORD_REVEALED", "REVEAL_FAILED"]
    assert all(entry_id in line for line in lines)
    for secret in ("p@ss1234", "correct-horse", "wrong-horse"):
        assert not any(secret in line for line in lines)
