"""Tests for the back-office repositories."""

import pytest

from frigo.backoffice.clients import ClientRepository
from frigo.backoffice.crates import CrateTypeRepository
from frigo.backoffice.rooms import RoomRepository, natural_key
from frigo.backoffice.settings import AppSettings, GeneralSettings, PricingSettings, TenantSettings
from frigo.shared.errors import DuplicateError, StoreError, ValidationError
from frigo.shared.models import Client, CrateType, PoolSettings, Room

TENANT = "tenant-1"


def new_room(name, sensor_id="S-CH1", **extra):
    return Room(id=None, tenant_id="", name=name, capacity=6000, sensor_id=sensor_id, **extra)


class TestRoomRepository:
    def test_create_and_list_in_natural_order(self, store):
        repo = RoomRepository(store, TENANT)
        for name in ("Chambre 10", "Chambre 2", "Chambre 1"):
            repo.create_room(new_room(name))

        names = [room.name for room in repo.list_rooms()]
        assert names == ["Chambre 1", "Chambre 2", "Chambre 10"]

    def test_create_sets_tenant_and_timestamp(self, store):
        room = RoomRepository(store, TENANT).create_room(new_room("  Chambre 1 "))
        stored = store.get("rooms", room.id).data
        assert stored["tenantId"] == TENANT
        assert stored["room"] == "Chambre 1"
        assert "createdAt" in stored

    def test_rooms_of_other_tenants_are_hidden(self, store):
        other = RoomRepository(store, "other").create_room(new_room("Chambre 1"))
        repo = RoomRepository(store, TENANT)
        assert repo.list_rooms() == []
        assert repo.get_room(other.id) is None

    def test_no_tenant(self, store):
        repo = RoomRepository(store, "")
        assert repo.list_rooms() == []
        with pytest.raises(ValidationError):
            repo.create_room(new_room("Chambre 1"))

    def test_duplicate_name(self, store):
        repo = RoomRepository(store, TENANT)
        repo.create_room(new_room("Chambre 1"))
        with pytest.raises(DuplicateError):
            repo.create_room(new_room("chambre 1"))

    def test_validation_collects_errors(self, store):
        with pytest.raises(ValidationError) as exc:
            RoomRepository(store, TENANT).create_room(new_room("", sensor_id="", ath_group_number=0))
        assert len(exc.value.messages) == 3

    def test_update(self, store):
        repo = RoomRepository(store, TENANT)
        room = repo.create_room(new_room("Chambre 1"))

        updated = repo.update_room(room.id, capacity=8000, tenant_id="hijack")

        assert updated.capacity == 8000
        assert store.get("rooms", room.id).data["tenantId"] == TENANT

    def test_update_rename_to_existing(self, store):
        repo = RoomRepository(store, TENANT)
        repo.create_room(new_room("Chambre 1"))
        second = repo.create_room(new_room("Chambre 2"))
        with pytest.raises(DuplicateError):
            repo.update_room(second.id, name="Chambre 1")

    def test_update_missing(self, store):
        with pytest.raises(StoreError):
            RoomRepository(store, TENANT).update_room("missing", capacity=1)

    def test_sensor_installation(self, store):
        repo = RoomRepository(store, TENANT)
        first = repo.create_room(new_room("Chambre 1"))
        repo.create_room(new_room("Chambre 2"))

        repo.update_sensor_installation(first.id, True)

        assert [r.name for r in repo.rooms_with_sensors()] == ["Chambre 1"]
        assert [r.name for r in repo.rooms_without_sensors()] == ["Chambre 2"]

    def test_active_only_and_delete(self, store):
        repo = RoomRepository(store, TENANT)
        room = repo.create_room(new_room("Chambre 1"))
        repo.create_room(new_room("Chambre 2", active=False))
        assert [r.name for r in repo.list_rooms(active_only=True)] == ["Chambre 1"]

        repo.delete_room(room.id)
        assert [r.name for r in repo.list_rooms()] == ["Chambre 2"]


def test_natural_key():
    assert sorted(["b10", "B2", "a"], key=natural_key) == ["a", "B2", "b10"]


class TestClientRepository:
    def test_create_with_audit_fields(self, store):
        client = ClientRepository(store, TENANT).create_client(
            Client(id=None, name="Atlas Fruits", email="contact@atlas.ma"), user="admin"
        )
        stored = store.get(f"tenants/{TENANT}/clients", client.id).data
        assert stored["createdBy"] == "admin"
        assert stored["lastModifiedBy"] == "admin"
        assert stored["createdAt"] == stored["updatedAt"]

    def test_duplicate_email(self, store):
        repo = ClientRepository(store, TENANT)
        repo.create_client(Client(id=None, name="A", email="a@x.ma"))
        with pytest.raises(DuplicateError) as exc:
            repo.create_client(Client(id=None, name="B", email=" A@X.ma "))
        assert exc.value.field == "email"

    def test_invalid_email(self, store):
        with pytest.raises(ValidationError):
            ClientRepository(store, TENANT).create_client(Client(id=None, name="A", email="nope"))

    def test_update_and_list(self, store):
        repo = ClientRepository(store, TENANT)
        client = repo.create_client(Client(id=None, name="Zed", email="z@x.ma"), user="admin")
        repo.create_client(Client(id=None, name="alpha", email="a@x.ma"))

        updated = repo.update_client(client.id, user="clerk", phone="0600000000")

        assert updated.phone == "0600000000"
        assert updated.created_by == "admin"
        assert updated.last_modified_by == "clerk"
        assert [c.name for c in repo.list_clients()] == ["alpha", "Zed"]

    def test_delete(self, store):
        repo = ClientRepository(store, TENANT)
        client = repo.create_client(Client(id=None, name="A", email="a@x.ma"))
        repo.delete_client(client.id)
        assert repo.get_client(client.id) is None


class TestTenantSettings:
    def test_defaults_when_missing(self, store):
        settings = TenantSettings(store, TENANT)
        assert settings.general().currency == "MAD"
        assert settings.app().max_reservation_days == 365
        assert settings.pricing().caution_par_caisse == 0
        assert settings.pool().pool_vides_total == 0

    def test_general_round_trip_with_season(self, store):
        settings = TenantSettings(store, TENANT)
        settings.save_general(GeneralSettings(
            name="Frigo Midelt",
            initial_cash_balance=2500,
            season_from="2024-09-01",
            season_to="2025-06-30",
        ))

        stored = store.get(f"tenants/{TENANT}/settings", "general").data
        assert stored["season"] == {"from": "2024-09-01", "to": "2025-06-30"}

        general = settings.general()
        assert general.name == "Frigo Midelt"
        assert general.initial_cash_balance == 2500
        assert general.season_from == "2024-09-01"

    def test_save_merges(self, store):
        store.set(f"tenants/{TENANT}/settings", "general", {"logoUrl": "x.png"})
        TenantSettings(store, TENANT).save_general(GeneralSettings(name="Frigo"))
        assert store.get(f"tenants/{TENANT}/settings", "general").data["logoUrl"] == "x.png"

    def test_general_validation(self):
        errors = GeneralSettings(
            name="",
            locale="en",
            capacity_unit="kg",
            initial_cash_balance=-1,
            season_from="2025-06-30",
            season_to="2024-09-01",
        ).validate()
        assert len(errors) == 5

    def test_invalid_settings_are_not_written(self, store):
        settings = TenantSettings(store, TENANT)
        with pytest.raises(ValidationError):
            settings.save_pricing(PricingSettings(tarif_caisse_saison=-5))
        assert store.get(f"tenants/{TENANT}/settings", "pricing") is None

    def test_app_validation(self):
        assert AppSettings().validate() == []
        assert len(AppSettings(max_reservation_days=0, min_deposit_percentage=150).validate()) == 2

    def test_pool(self, store):
        settings = TenantSettings(store, TENANT)
        settings.save_pool(PoolSettings(pool_vides_total=120))
        assert settings.pool().pool_vides_total == 120
        with pytest.raises(ValidationError):
            settings.save_pool(PoolSettings(pool_vides_total=-1))


class TestCrateTypeRepository:
    def test_pool_total_counts_active_types(self, store):
        repo = CrateTypeRepository(store, TENANT)
        repo.create_crate_type(CrateType(id=None, name="Plastique 20kg", deposit_amount=10, quantity=300))
        repo.create_crate_type(CrateType(id=None, name="Bois", type="wood", deposit_amount=15, quantity=120))
        old = repo.create_crate_type(CrateType(id=None, name="Old", quantity=50))

        repo.update_crate_type(old.id, is_active=False)

        assert repo.pool_total() == 420
        assert repo.pool_settings() == PoolSettings(pool_vides_total=420)
        assert [c.name for c in repo.list_crate_types(active_only=True)] == ["Bois", "Plastique 20kg"]

    def test_validation(self, store):
        with pytest.raises(ValidationError):
            CrateTypeRepository(store, TENANT).create_crate_type(
                CrateType(id=None, name="X", type="cardboard", quantity=-1)
            )

    def test_stored_fields(self, store):
        crate = CrateTypeRepository(store, TENANT).create_crate_type(
            CrateType(id=None, name="Bois", type="wood", deposit_amount=15, custom_name="Caisse bois")
        )
        stored = store.get(f"tenants/{TENANT}/crate-types", crate.id).data
        assert stored["depositAmount"] == 15
        assert stored["isActive"] is True
        assert stored["customName"] == "Caisse bois"


class TestMissingTenant:
    def test_clients(self, store):
        store.add("tenants//clients", {"name": "Ghost", "email": "g@x.ma"})
        repo = ClientRepository(store, "")
        doc_id = store.query("tenants//clients")[0].id

        assert repo.list_clients() == []
        assert repo.get_client(doc_id) is None
        with pytest.raises(ValidationError):
            repo.create_client(Client(id=None, name="A", email="a@x.ma"))
        with pytest.raises(ValidationError):
            repo.update_client(doc_id, phone="0600000000")
        with pytest.raises(ValidationError):
            repo.delete_client(doc_id)
        assert len(store.query("tenants//clients")) == 1

    def test_crate_types(self, store):
        repo = CrateTypeRepository(store, "")
        assert repo.list_crate_types() == []
        assert repo.get_crate_type("c1") is None
        assert repo.pool_total() == 0
        with pytest.raises(ValidationError):
            repo.create_crate_type(CrateType(id=None, name="Bois", type="wood"))
        with pytest.raises(ValidationError):
            repo.update_crate_type("c1", quantity=10)
        with pytest.raises(ValidationError):
            repo.delete_crate_type("c1")
        assert store.query("tenants//crate-types") == []

    def test_settings(self, store):
        store.set("tenants//settings", "general", {"currency": "EUR"})
        settings = TenantSettings(store, "")
        assert settings.general().currency == "MAD"
        with pytest.raises(ValidationError):
            settings.save_general(GeneralSettings())
