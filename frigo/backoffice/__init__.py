"""Back-office repositories: rooms, clients, crate types and tenant settings."""

from .clients import ClientRepository
from .crates import CrateTypeRepository
from .rooms import RoomRepository
from .settings import AppSettings, GeneralSettings, PricingSettings, TenantSettings

__all__ = [
    "ClientRepository",
    "CrateTypeRepository",
    "RoomRepository",
    "AppSettings",
    "GeneralSettings",
    "PricingSettings",
    "TenantSettings",
]
