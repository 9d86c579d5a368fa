"""Crate types and the empty-crate pool."""

import dataclasses
import logging
from typing import Any, List, Optional

from frigo.shared.errors import StoreError, ValidationError
from frigo.shared.models import CrateType, PoolSettings
from frigo.shared.store import DocumentStore

logger = logging.getLogger(__name__)

CRATE_MATERIALS = ("wood", "plastic")


def validate_crate_type(crate: CrateType) -> List[str]:
    errors = []
    if not crate.name.strip():
        errors.append("Crate type name is required")
    if crate.type not in CRATE_MATERIALS:
        errors.append(f"Crate material must be one of {', '.join(CRATE_MATERIALS)}")
    if crate.deposit_amount < 0:
        errors.append("Deposit amount must be positive")
    if crate.quantity < 0:
        errors.append("Quantity must be positive")
    return errors


class CrateTypeRepository:
    """Crate types of one tenant, stored under ``tenants/{tenant_id}/crate-types``."""

    def __init__(self, store: DocumentStore, tenant_id: str):
        self.store = store
        self.tenant_id = tenant_id

    @property
    def collection(self) -> str:
        return f"tenants/{self.tenant_id}/crate-types"

    def _require_tenant(self) -> None:
        if not self.tenant_id:
            raise ValidationError(["No tenant selected"])

    def list_crate_types(self, active_only: bool = False) -> List[CrateType]:
        if not self.tenant_id:
            return []
        crates = [CrateType.from_doc(doc.id, doc.data) for doc in self.store.query(self.collection)]
        if active_only:
            crates = [crate for crate in crates if crate.is_active]
        return sorted(crates, key=lambda c: c.name.lower())

    def get_crate_type(self, crate_id: str) -> Optional[CrateType]:
        if not self.tenant_id:
            return None
        doc = self.store.get(self.collection, crate_id)
        return CrateType.from_doc(doc.id, doc.data) if doc else None

    def create_crate_type(self, crate: CrateType) -> CrateType:
        self._require_tenant()
        crate = dataclasses.replace(crate, id=None, name=crate.name.strip())
        errors = validate_crate_type(crate)
        if errors:
            raise ValidationError(errors)
        crate.id = self.store.add(self.collection, crate.to_doc())
        logger.info(f"Created crate type {crate.name} ({crate.id})")
        return crate

    def update_crate_type(self, crate_id: str, **changes: Any) -> CrateType:
        self._require_tenant()
        current = self.get_crate_type(crate_id)
        if current is None:
            raise StoreError(f"Crate type {crate_id} not found")
        changes.pop("id", None)
        crate = dataclasses.replace(current, **changes)
        errors = validate_crate_type(crate)
        if errors:
            raise ValidationError(errors)
        self.store.update(self.collection, crate_id, crate.to_doc())
        return crate

    def delete_crate_type(self, crate_id: str) -> None:
        self._require_tenant()
        self.store.delete(self.collection, crate_id)
        logger.info(f"Deleted crate type {crate_id}")

    def pool_total(self) -> int:
        """Number of empty crates across active crate types."""
        return sum(crate.quantity for crate in self.list_crate_types(active_only=True))

    def pool_settings(self) -> PoolSettings:
        return PoolSettings(pool_vides_total=self.pool_total())
