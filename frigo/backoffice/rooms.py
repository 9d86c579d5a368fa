"""Room administration for a tenant."""

import dataclasses
import logging
import re
from datetime import datetime
from typing import Any, List, Optional

from frigo.shared.errors import DuplicateError, StoreError, ValidationError
from frigo.shared.models import Room
from frigo.shared.store import DocumentStore

logger = logging.getLogger(__name__)

ROOMS_COLLECTION = "rooms"


def natural_key(name: str) -> List[Any]:
    """Sort key that orders "Chambre 2" before "Chambre 10"."""
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", name)]


def validate_room(room: Room) -> List[str]:
    errors = []
    if not room.name.strip():
        errors.append("Room name is required")
    if room.capacity < 0:
        errors.append("Capacity must be positive")
    if room.capacity_crates is not None and room.capacity_crates < 0:
        errors.append("Crate capacity must be positive")
    if room.capacity_pallets is not None and room.capacity_pallets < 0:
        errors.append("Pallet capacity must be positive")
    if not room.sensor_id.strip():
        errors.append("Sensor id is required")
    if room.ath_group_number is not None and room.ath_group_number < 1:
        errors.append("ATH group number must be at least 1")
    return errors


class RoomRepository:
    """Rooms live in a top-level collection, scoped by ``tenantId``.

    Reads without a tenant return nothing; writes without a tenant fail.
    """

    def __init__(self, store: DocumentStore, tenant_id: str):
        self.store = store
        self.tenant_id = tenant_id

    def _require_tenant(self) -> None:
        if not self.tenant_id:
            raise ValidationError(["No tenant selected"])

    def list_rooms(self, active_only: bool = False) -> List[Room]:
        """Rooms of the tenant, in natural name order."""
        if not self.tenant_id:
            logger.warning("No tenant selected; returning no rooms")
            return []

        docs = self.store.query(ROOMS_COLLECTION, {"tenantId": self.tenant_id})
        rooms = [Room.from_doc(doc.id, doc.data) for doc in docs]
        if active_only:
            rooms = [room for room in rooms if room.active]
        return sorted(rooms, key=lambda room: natural_key(room.name))

    def get_room(self, room_id: str) -> Optional[Room]:
        doc = self.store.get(ROOMS_COLLECTION, room_id)
        if doc is None or doc.data.get("tenantId") != self.tenant_id:
            return None
        return Room.from_doc(doc.id, doc.data)

    def _check_unique_name(self, name: str, exclude_id: Optional[str] = None) -> None:
        wanted = name.strip().lower()
        for room in self.list_rooms():
            if room.id != exclude_id and room.name.strip().lower() == wanted:
                raise DuplicateError(f"A room named {name!r} already exists", field="room")

    def create_room(self, room: Room) -> Room:
        """Validate and store a new room for the tenant."""
        self._require_tenant()
        room = dataclasses.replace(room, id=None, tenant_id=self.tenant_id, name=room.name.strip())

        errors = validate_room(room)
        if errors:
            raise ValidationError(errors)
        self._check_unique_name(room.name)

        room.created_at = datetime.now()
        room.id = self.store.add(ROOMS_COLLECTION, room.to_doc())
        logger.info(f"Created room {room.name} ({room.id})")
        return room

    def update_room(self, room_id: str, **changes: Any) -> Room:
        """Apply attribute changes (``Room`` field names) to a stored room."""
        self._require_tenant()
        current = self.get_room(room_id)
        if current is None:
            raise StoreError(f"Room {room_id} not found")

        for protected in ("id", "tenant_id", "created_at"):
            changes.pop(protected, None)
        room = dataclasses.replace(current, **changes)
        room.name = room.name.strip()

        errors = validate_room(room)
        if errors:
            raise ValidationError(errors)
        if room.name.lower() != current.name.strip().lower():
            self._check_unique_name(room.name, exclude_id=room_id)

        doc = room.to_doc()
        doc.pop("createdAt", None)
        self.store.update(ROOMS_COLLECTION, room_id, doc)
        logger.info(f"Updated room {room.name} ({room_id})")
        return room

    def delete_room(self, room_id: str) -> None:
        self._require_tenant()
        if self.get_room(room_id) is None:
            raise StoreError(f"Room {room_id} not found")
        self.store.delete(ROOMS_COLLECTION, room_id)
        logger.info(f"Deleted room {room_id}")

    def update_sensor_installation(self, room_id: str, installed: bool) -> Room:
        return self.update_room(room_id, capteur_installed=installed)

    def rooms_with_sensors(self) -> List[Room]:
        return [room for room in self.list_rooms() if room.capteur_installed]

    def rooms_without_sensors(self) -> List[Room]:
        return [room for room in self.list_rooms() if not room.capteur_installed]
