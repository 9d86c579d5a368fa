"""Core data models for rooms, readings and back-office records.

Documents are stored with the camelCase field names used by the dashboard,
the dataclasses expose snake_case attributes. ``from_doc`` / ``to_doc`` do
the translation in both directions.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


def to_local_naive(value: datetime) -> datetime:
    """Drop the timezone of an aware datetime after converting it to local time."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _as_datetime(value: Any) -> Optional[datetime]:
    """Convert a stored timestamp (datetime, Firestore timestamp, epoch) to a local datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return to_local_naive(datetime.fromisoformat(value))
        except ValueError:
            return None
    return None


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass
class SensorReading:
    """A normalized telemetry reading for one room.

    Never persisted; recomputed from the latest telemetry snapshot on every
    fetch. ``magnet`` is 1 when the door contact reports closed, 0 otherwise.
    """
    temperature: float
    humidity: float
    battery: float
    magnet: int
    timestamp: datetime

    @property
    def door_closed(self) -> bool:
        return self.magnet == 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON/logging."""
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "battery": self.battery,
            "magnet": self.magnet,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class OutdoorWeather:
    """Current outdoor conditions for the facility location."""
    temperature: float
    humidity: float
    fetched_at: datetime = field(default_factory=datetime.now)


@dataclass
class Room:
    """A cold room owned by a tenant, optionally wired to a sensor channel."""
    id: Optional[str]
    tenant_id: str
    name: str
    capacity: int = 0
    sensor_id: str = ""
    active: bool = True
    capteur_installed: bool = False
    capacity_crates: Optional[int] = None
    capacity_pallets: Optional[int] = None
    ath_group_number: Optional[int] = None
    boitie_sensor_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: Dict[str, Any]) -> "Room":
        """Create a room from a stored document."""
        ath_group = data.get("athGroupNumber")
        return cls(
            id=doc_id,
            tenant_id=data.get("tenantId", ""),
            name=data.get("room", ""),
            capacity=_as_int(data.get("capacity")),
            sensor_id=data.get("sensorId", ""),
            active=bool(data.get("active", True)),
            capteur_installed=bool(data.get("capteurInstalled", False)),
            capacity_crates=data.get("capacityCrates"),
            capacity_pallets=data.get("capacityPallets"),
            ath_group_number=_as_int(ath_group) if ath_group is not None else None,
            boitie_sensor_id=data.get("boitieSensorId") or None,
            created_at=_as_datetime(data.get("createdAt")),
        )

    def to_doc(self) -> Dict[str, Any]:
        """Convert to a document, omitting unset optional fields."""
        doc: Dict[str, Any] = {
            "tenantId": self.tenant_id,
            "room": self.name,
            "capacity": self.capacity,
            "sensorId": self.sensor_id,
            "active": self.active,
            "capteurInstalled": self.capteur_installed,
        }
        optional = {
            "capacityCrates": self.capacity_crates,
            "capacityPallets": self.capacity_pallets,
            "athGroupNumber": self.ath_group_number,
            "boitieSensorId": self.boitie_sensor_id,
            "createdAt": self.created_at,
        }
        doc.update({k: v for k, v in optional.items() if v is not None})
        return doc


@dataclass
class Client:
    """A tenant's customer. The password is stored as entered."""
    id: Optional[str]
    name: str
    email: str
    phone: str = ""
    company: str = ""
    password: str = ""
    created_by: Optional[str] = None
    last_modified_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: Dict[str, Any]) -> "Client":
        return cls(
            id=doc_id,
            name=data.get("name", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            company=data.get("company", ""),
            password=data.get("password", ""),
            created_by=data.get("createdBy"),
            last_modified_by=data.get("lastModifiedBy"),
            created_at=_as_datetime(data.get("createdAt")),
            updated_at=_as_datetime(data.get("updatedAt")),
        )

    def to_doc(self) -> Dict[str, Any]:
        doc = {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "company": self.company,
            "password": self.password,
            "createdBy": self.created_by,
            "lastModifiedBy": self.last_modified_by,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        return {k: v for k, v in doc.items() if v is not None}


@dataclass
class CashMovement:
    """A stored cash register movement."""
    id: Optional[str]
    type: str
    amount: float
    payment_method: str
    reason: str
    reference: str
    client_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: Dict[str, Any]) -> "CashMovement":
        return cls(
            id=doc_id,
            type=data.get("type", "in"),
            amount=_as_float(data.get("amount")),
            payment_method=data.get("paymentMethod", "cash"),
            reason=data.get("reason", ""),
            reference=data.get("reference", ""),
            client_id=data.get("clientId"),
            notes=data.get("notes"),
            created_at=_as_datetime(data.get("createdAt")),
            created_by=data.get("createdBy"),
        )

    def to_doc(self) -> Dict[str, Any]:
        doc = {
            "type": self.type,
            "amount": self.amount,
            "paymentMethod": self.payment_method,
            "reason": self.reason,
            "reference": self.reference,
            "clientId": self.client_id,
            "notes": self.notes,
            "createdAt": self.created_at,
            "createdBy": self.created_by,
        }
        return {k: v for k, v in doc.items() if v is not None}


@dataclass
class CrateType:
    """A crate model tracked in the empty-crate pool."""
    id: Optional[str]
    name: str
    type: str = "plastic"
    color: str = ""
    deposit_amount: float = 0.0
    quantity: int = 0
    is_active: bool = True
    custom_name: Optional[str] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: Dict[str, Any]) -> "CrateType":
        return cls(
            id=doc_id,
            name=data.get("name", ""),
            type=data.get("type", "plastic"),
            color=data.get("color", ""),
            deposit_amount=_as_float(data.get("depositAmount")),
            quantity=_as_int(data.get("quantity")),
            is_active=bool(data.get("isActive", True)),
            custom_name=data.get("customName"),
        )

    def to_doc(self) -> Dict[str, Any]:
        doc = {
            "name": self.name,
            "type": self.type,
            "color": self.color,
            "depositAmount": self.deposit_amount,
            "quantity": self.quantity,
            "isActive": self.is_active,
            "customName": self.custom_name,
        }
        return {k: v for k, v in doc.items() if v is not None}


@dataclass
class PoolSettings:
    """Empty-crate pool size, derived from the active crate types."""
    pool_vides_total: int = 0

    def to_doc(self) -> Dict[str, Any]:
        return {"pool_vides_total": self.pool_vides_total}
