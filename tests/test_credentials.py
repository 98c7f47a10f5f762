"""
Tests for credential storage.
"""
import os
import stat

from clocker.bamboohr.types import BambooHRConfig
from clocker.credentials import (
    API_KEY,
    COMPANY_DOMAIN,
    DotenvSecretStore,
    MemorySecretStore,
    delete_config,
    has_credentials,
    load_config,
    save_config,
)

CONFIG = BambooHRConfig(api_key="k3y=with/symbols", company_domain="acme", employee_id="42")


def test_memory_store_roundtrip():
    store = MemorySecretStore()
    assert load_config(store) is None

    save_config(store, CONFIG)

    assert load_config(store) == CONFIG
    assert has_credentials(store) is True


def test_partial_credentials_are_not_a_config():
    """All three values must be present."""
    store = MemorySecretStore({API_KEY: "k", COMPANY_DOMAIN: "acme"})
    assert load_config(store) is None
    store.set("employeeId", "")
    assert has_credentials(store) is False


def test_delete_config_is_idempotent():
    store = MemorySecretStore()
    save_config(store, CONFIG)
    delete_config(store)
    delete_config(store)
    assert load_config(store) is None


def test_dotenv_store_persists_to_file(tmp_path):
    """Values survive a new store instance reading the same file."""
    path = tmp_path / "secrets.env"
    save_config(DotenvSecretStore(path), CONFIG)

    assert load_config(DotenvSecretStore(path)) == CONFIG
    assert stat.S_IMODE(os.stat(path).st_mode) & 0o077 == 0


def test_dotenv_store_sees_external_edits(tmp_path):
    path = tmp_path / "secrets.env"
    store = DotenvSecretStore(path)
    save_config(store, CONFIG)

    DotenvSecretStore(path).set(API_KEY, "rotated")

    assert store.get(API_KEY) == "rotated"


def test_dotenv_store_delete(tmp_path):
    path = tmp_path / "secrets.env"
    store = DotenvSecretStore(path)
    assert store.get(API_KEY) is None
    store.delete(API_KEY)
    assert not path.exists()

    save_config(store, CONFIG)
    store.delete(COMPANY_DOMAIN)
    store.delete(COMPANY_DOMAIN)

    assert store.get(COMPANY_DOMAIN) is None
    assert store.get(API_KEY) == CONFIG.api_key
    assert has_credentials(store) is False
