"""Tenant settings documents: general, pricing, pool and app preferences.

Each lives at ``tenants/{tenant_id}/settings/{name}`` and is written with a
merge so fields managed elsewhere survive.
"""

import logging
from dataclasses import asdict, dataclass, fields
from datetime import date
from typing import Any, Dict, List, Optional

from frigo.shared.errors import ValidationError
from frigo.shared.models import PoolSettings
from frigo.shared.store import DocumentStore

logger = logging.getLogger(__name__)

LOCALES = ("fr", "ar")
CAPACITY_UNITS = ("caisses", "palettes")
LANGUAGES = ("fr", "ar", "en")
THEMES = ("light", "dark")


def _parse_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {key: value for key, value in data.items() if key in names}


@dataclass
class GeneralSettings:
    """Company identity, units, opening cash balance and season dates."""
    name: str = ""
    currency: str = "MAD"
    locale: str = "fr"
    capacity_unit: str = "caisses"
    ratio_caisses_par_palette: Optional[float] = None
    base_url: Optional[str] = None
    initial_cash_balance: float = 0.0
    season_from: Optional[str] = None
    season_to: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []
        if not self.name.strip():
            errors.append("Company name is required")
        if self.currency != "MAD":
            errors.append("Currency must be MAD")
        if self.locale not in LOCALES:
            errors.append(f"Locale must be one of {', '.join(LOCALES)}")
        if self.capacity_unit not in CAPACITY_UNITS:
            errors.append(f"Capacity unit must be one of {', '.join(CAPACITY_UNITS)}")
        if self.ratio_caisses_par_palette is not None and self.ratio_caisses_par_palette <= 0:
            errors.append("Crates per pallet must be positive")
        if self.initial_cash_balance < 0:
            errors.append("Initial cash balance must be positive")

        if self.season_from or self.season_to:
            start, end = _parse_date(self.season_from), _parse_date(self.season_to)
            if start is None or end is None:
                errors.append("Season dates must be YYYY-MM-DD")
            elif start >= end:
                errors.append("Season start must be before season end")
        return errors

    @classmethod
    def from_doc(cls, data: Dict[str, Any]) -> "GeneralSettings":
        season = data.get("season") or {}
        values = _known_fields(cls, data)
        values["season_from"] = season.get("from")
        values["season_to"] = season.get("to")
        return cls(**values)

    def to_doc(self) -> Dict[str, Any]:
        doc = asdict(self)
        season_from, season_to = doc.pop("season_from"), doc.pop("season_to")
        if season_from or season_to:
            doc["season"] = {"from": season_from, "to": season_to}
        return {k: v for k, v in doc.items() if v is not None}


@dataclass
class PricingSettings:
    tarif_caisse_saison: float = 0.0
    caution_par_caisse: float = 0.0

    def validate(self) -> List[str]:
        errors = []
        if self.tarif_caisse_saison < 0:
            errors.append("Seasonal crate rate must be positive")
        if self.caution_par_caisse < 0:
            errors.append("Deposit per crate must be positive")
        return errors

    @classmethod
    def from_doc(cls, data: Dict[str, Any]) -> "PricingSettings":
        return cls(**_known_fields(cls, data))

    def to_doc(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AppSettings:
    """Dashboard preferences."""
    company_name: str = "Frigo SaaS"
    currency: str = "MAD"
    date_format: str = "DD/MM/YYYY"
    language: str = "fr"
    theme: str = "light"
    max_reservation_days: int = 365
    min_deposit_percentage: float = 10.0
    auto_approve_reservations: bool = False
    email_notifications: bool = True
    sms_notifications: bool = False

    def validate(self) -> List[str]:
        errors = []
        if self.language not in LANGUAGES:
            errors.append(f"Language must be one of {', '.join(LANGUAGES)}")
        if self.theme not in THEMES:
            errors.append(f"Theme must be one of {', '.join(THEMES)}")
        if self.max_reservation_days < 1:
            errors.append("Maximum reservation days must be at least 1")
        if not 0 <= self.min_deposit_percentage <= 100:
            errors.append("Minimum deposit percentage must be between 0 and 100")
        return errors

    @classmethod
    def from_doc(cls, data: Dict[str, Any]) -> "AppSettings":
        return cls(**_known_fields(cls, data))

    def to_doc(self) -> Dict[str, Any]:
        return asdict(self)


class TenantSettings:
    """Reads and writes the settings documents of one tenant.

    Missing documents read as defaults.
    """

    def __init__(self, store: DocumentStore, tenant_id: str):
        self.store = store
        self.tenant_id = tenant_id

    @property
    def collection(self) -> str:
        return f"tenants/{self.tenant_id}/settings"

    def _read(self, name: str) -> Dict[str, Any]:
        if not self.tenant_id:
            return {}
        doc = self.store.get(self.collection, name)
        return doc.data if doc else {}

    def _write(self, name: str, settings: Any) -> None:
        if not self.tenant_id:
            raise ValidationError(["No tenant selected"])
        if hasattr(settings, "validate"):
            errors = settings.validate()
            if errors:
                raise ValidationError(errors)
        self.store.set(self.collection, name, settings.to_doc(), merge=True)
        logger.info(f"Saved {name} settings for tenant {self.tenant_id}")

    def general(self) -> GeneralSettings:
        return GeneralSettings.from_doc(self._read("general"))

    def save_general(self, settings: GeneralSettings) -> None:
        self._write("general", settings)

    def pricing(self) -> PricingSettings:
        return PricingSettings.from_doc(self._read("pricing"))

    def save_pricing(self, settings: PricingSettings) -> None:
        self._write("pricing", settings)

    def app(self) -> AppSettings:
        return AppSettings.from_doc(self._read("app"))

    def save_app(self, settings: AppSettings) -> None:
        self._write("app", settings)

    def pool(self) -> PoolSettings:
        data = self._read("pool")
        return PoolSettings(pool_vides_total=int(data.get("pool_vides_total", 0)))

    def save_pool(self, settings: PoolSettings) -> None:
        if settings.pool_vides_total < 0:
            raise ValidationError(["Pool size must be positive"])
        self._write("pool", settings)
