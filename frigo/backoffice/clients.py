"""Client administration for a tenant."""

import dataclasses
import logging
import re
from datetime import datetime
from typing import Any, List, Optional

from frigo.shared.errors import DuplicateError, StoreError, ValidationError
from frigo.shared.models import Client
from frigo.shared.store import DocumentStore

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_client(client: Client) -> List[str]:
    errors = []
    if not client.name.strip():
        errors.append("Client name is required")
    if not EMAIL_RE.match(client.email.strip()):
        errors.append("A valid email is required")
    return errors


class ClientRepository:
    """Clients of one tenant, stored under ``tenants/{tenant_id}/clients``."""

    def __init__(self, store: DocumentStore, tenant_id: str):
        self.store = store
        self.tenant_id = tenant_id

    @property
    def collection(self) -> str:
        return f"tenants/{self.tenant_id}/clients"

    def _require_tenant(self) -> None:
        if not self.tenant_id:
            raise ValidationError(["No tenant selected"])

    def list_clients(self) -> List[Client]:
        if not self.tenant_id:
            return []
        clients = [Client.from_doc(doc.id, doc.data) for doc in self.store.query(self.collection)]
        return sorted(clients, key=lambda c: c.name.lower())

    def get_client(self, client_id: str) -> Optional[Client]:
        if not self.tenant_id:
            return None
        doc = self.store.get(self.collection, client_id)
        return Client.from_doc(doc.id, doc.data) if doc else None

    def _check_unique_email(self, email: str, exclude_id: Optional[str] = None) -> None:
        wanted = email.strip().lower()
        for client in self.list_clients():
            if client.id != exclude_id and client.email.strip().lower() == wanted:
                raise DuplicateError(f"A client with email {email} already exists", field="email")

    def create_client(self, client: Client, user: Optional[str] = None) -> Client:
        self._require_tenant()

        now = datetime.now()
        client = dataclasses.replace(
            client,
            id=None,
            name=client.name.strip(),
            email=client.email.strip(),
            created_by=user,
            last_modified_by=user,
            created_at=now,
            updated_at=now,
        )
        errors = validate_client(client)
        if errors:
            raise ValidationError(errors)
        self._check_unique_email(client.email)

        client.id = self.store.add(self.collection, client.to_doc())
        logger.info(f"Created client {client.name} ({client.id})")
        return client

    def update_client(self, client_id: str, user: Optional[str] = None, **changes: Any) -> Client:
        self._require_tenant()
        current = self.get_client(client_id)
        if current is None:
            raise StoreError(f"Client {client_id} not found")

        for protected in ("id", "created_by", "created_at"):
            changes.pop(protected, None)
        client = dataclasses.replace(current, **changes)
        client.last_modified_by = user
        client.updated_at = datetime.now()

        errors = validate_client(client)
        if errors:
            raise ValidationError(errors)
        if client.email.strip().lower() != current.email.strip().lower():
            self._check_unique_email(client.email, exclude_id=client_id)

        self.store.update(self.collection, client_id, client.to_doc())
        logger.info(f"Updated client {client.name} ({client_id})")
        return client

    def delete_client(self, client_id: str) -> None:
        self._require_tenant()
        self.store.delete(self.collection, client_id)
        logger.info(f"Deleted client {client_id}")
