"""
Credential storage.

The service only needs get/set/delete by key, so any backend satisfying
SecretStore can be injected. Two are provided: an in-memory store and a
dotenv-format file.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

from dotenv import dotenv_values, set_key, unset_key

from clocker.bamboohr.types import BambooHRConfig

logger = logging.getLogger(__name__)

API_KEY = "apiKey"
COMPANY_DOMAIN = "companyDomain"
EMPLOYEE_ID = "employeeId"
CREDENTIAL_KEYS = (API_KEY, COMPANY_DOMAIN, EMPLOYEE_ID)


class SecretStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemorySecretStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class DotenvSecretStore:
    """
    Secrets kept in a dotenv-format file, readable only by the owner.
    The file is re-read on every get so edits made by other processes are seen.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def get(self, key: str) -> Optional[str]:
        if not self.path.exists():
            return None
        value = dotenv_values(self.path).get(key)
        return value or None

    def set(self, key: str, value: str) -> None:
        if not self.path.exists():
            self.path.touch(mode=0o600)
        set_key(str(self.path), key, value, quote_mode="always")

    def delete(self, key: str) -> None:
        if not self.path.exists():
            return
        if key in dotenv_values(self.path):
            unset_key(str(self.path), key)


def load_config(store: SecretStore) -> Optional[BambooHRConfig]:
    """The stored credentials, or None unless all three are present."""
    values = [store.get(key) for key in CREDENTIAL_KEYS]
    if not all(values):
        return None
    api_key, company_domain, employee_id = values
    return BambooHRConfig(api_key=api_key, company_domain=company_domain, employee_id=employee_id)


def has_credentials(store: SecretStore) -> bool:
    return load_config(store) is not None


def save_config(store: SecretStore, config: BambooHRConfig) -> None:
    store.set(API_KEY, config.api_key)
    store.set(COMPANY_DOMAIN, config.company_domain)
    store.set(EMPLOYEE_ID, config.employee_id)
    logger.info(f"Credentials saved for company {config.company_domain}, employee {config.employee_id}")


def delete_config(store: SecretStore) -> None:
    for key in CREDENTIAL_KEYS:
        store.delete(key)
    logger.info("Credentials deleted")
