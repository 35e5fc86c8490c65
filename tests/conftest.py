"""Fixtures compartidos: almacenamiento en memoria para pedidos, perfiles y tipos."""

from dataclasses import replace
from typing import Optional

import pytest

from order_profiles.domain.models import (
    FieldDefinition,
    Order,
    OrderType,
    Profile,
    ProfileType,
    ProfileTypeDefinition,
    Shipment,
)
from order_profiles.domain.value_objects import Address
from order_profiles.utils.error_handler import PersistenceException, ValidationException


def make_address(**overrides) -> Address:
    values = {
        "country_code": "US",
        "administrative_area": "OR",
        "locality": "Portland",
        "postal_code": "97201",
        "address_line1": "1 Main St",
        "given_name": "Ada",
        "family_name": "Lovelace",
    }
    values.update(overrides)
    return Address(**values)


class FakeStore:
    """Estado persistido compartido por los repositorios en memoria."""

    def __init__(self):
        self.profiles: dict[int, Profile] = {}
        self.orders: dict[int, dict] = {}
        self.order_types: dict[str, OrderType] = {}
        self.profile_types: dict[str, ProfileTypeDefinition] = {}
        self.fields: dict[str, dict[str, FieldDefinition]] = {}
        self.profile_saves: list[int] = []
        self.shipment_saves: list[int] = []
        self._next_profile_id = 1
        self._next_shipment_id = 1

    def next_profile_id(self) -> int:
        profile_id = self._next_profile_id
        self._next_profile_id += 1
        return profile_id

    def add_profile(self, profile_type: ProfileType = ProfileType.COMMON, **address) -> int:
        profile_id = self.next_profile_id()
        self.profiles[profile_id] = Profile(type=profile_type, address=make_address(**address), id=profile_id)
        return profile_id

    def add_order(
        self,
        order_id: int,
        billing_profile_id: Optional[int],
        shipping_profile_ids: tuple = (),
        order_type: str = "default",
    ) -> None:
        shipments = {}
        for shipping_profile_id in shipping_profile_ids:
            shipments[self._next_shipment_id] = shipping_profile_id
            self._next_shipment_id += 1
        self.orders[order_id] = {
            "order_type": order_type,
            "billing_profile_id": billing_profile_id,
            "shipments": shipments,
        }

    def shipping_profile_ids(self, order_id: int) -> list[Optional[int]]:
        return list(self.orders[order_id]["shipments"].values())

    def profile_type_of(self, profile_id: int) -> ProfileType:
        return self.profiles[profile_id].type


class FakeOrderRepository:
    def __init__(self, store: FakeStore, fail_load_ids: tuple = ()):
        self.store = store
        self.fail_load_ids = set(fail_load_ids)

    async def load(self, order_id):
        if order_id in self.fail_load_ids:
            raise PersistenceException(
                message=f"order {order_id} could not be read", entity="order", entity_id=order_id, operation="load"
            )
        row = self.store.orders.get(order_id)
        if row is None:
            return None

        ids = {row["billing_profile_id"], *row["shipments"].values()}
        profiles = {pid: replace(self.store.profiles[pid]) for pid in ids if pid in self.store.profiles}
        return Order(
            id=order_id,
            order_type_id=row["order_type"],
            billing_profile=profiles.get(row["billing_profile_id"]),
            shipments=[
                Shipment(id=shipment_id, order_id=order_id, shipping_profile=profiles.get(profile_id))
                for shipment_id, profile_id in row["shipments"].items()
            ],
        )

    async def query(self, order_type_id):
        return sorted(oid for oid, row in self.store.orders.items() if row["order_type"] == order_type_id)

    async def count(self, order_type_id):
        return sum(1 for row in self.store.orders.values() if row["order_type"] == order_type_id)


class FakeProfileRepository:
    def __init__(self, store: FakeStore, fail_save_ids: tuple = (), fail_new: bool = False):
        self.store = store
        self.fail_save_ids = set(fail_save_ids)
        self.fail_new = fail_new

    async def save(self, profile):
        if profile.id in self.fail_save_ids or (profile.is_new and self.fail_new):
            raise PersistenceException(
                message="profile save failed", entity="profile", entity_id=profile.id, operation="save"
            )
        if profile.is_new:
            profile.id = self.store.next_profile_id()
        self.store.profiles[profile.id] = replace(profile)
        self.store.profile_saves.append(profile.id)
        return profile

    async def duplicate(self, profile):
        return profile.duplicate()


class FakeShipmentRepository:
    def __init__(self, store: FakeStore, fail: bool = False):
        self.store = store
        self.fail = fail

    async def save(self, shipment):
        if self.fail:
            raise PersistenceException(
                message="shipment save failed", entity="shipment", entity_id=shipment.id, operation="save"
            )
        self.store.orders[shipment.order_id]["shipments"][shipment.id] = shipment.shipping_profile_id
        self.store.shipment_saves.append(shipment.id)
        return shipment


class FakeOrderTypeRepository:
    def __init__(self, store: FakeStore):
        self.store = store

    async def load(self, order_type_id):
        order_type = self.store.order_types.get(order_type_id)
        return replace(order_type) if order_type else None

    async def save(self, order_type):
        current = self.store.order_types.get(order_type.id)
        if current and current.use_multiple_profile_types and not order_type.use_multiple_profile_types:
            raise ValidationException(
                message="cannot switch back", field="use_multiple_profile_types", invalid_value=False
            )
        self.store.order_types[order_type.id] = replace(order_type)
        return order_type


class FakeProfileTypeRepository:
    def __init__(self, store: FakeStore):
        self.store = store

    async def load(self, profile_type_id):
        return self.store.profile_types.get(profile_type_id)

    async def create(self, profile_type, fields=None):
        self.store.profile_types[profile_type.id] = profile_type
        self.store.fields.setdefault(profile_type.id, {})
        for field_definition in fields or []:
            self.store.fields[profile_type.id][field_definition.field_name] = field_definition
        return profile_type

    async def get_field_definitions(self, profile_type_id):
        return dict(self.store.fields.get(profile_type_id, {}))

    async def add_field_definition(self, field_definition):
        self.store.fields.setdefault(field_definition.profile_type, {})[field_definition.field_name] = field_definition
        return field_definition


@pytest.fixture
def store() -> FakeStore:
    store = FakeStore()
    store.order_types["default"] = OrderType(id="default", label="Default")
    store.profile_types["customer"] = ProfileTypeDefinition(id="customer", label="Customer")
    store.fields["customer"] = {
        "address": FieldDefinition("customer", "address", "address", "Address", is_base_field=True),
        "phone": FieldDefinition("customer", "phone", "telephone", "Phone"),
        "tax_number": FieldDefinition("customer", "tax_number", "string", "Tax number", settings={"max": 32}),
    }
    return store


@pytest.fixture
def repositories(store) -> dict:
    return {
        "order_repository": FakeOrderRepository(store),
        "profile_repository": FakeProfileRepository(store),
        "shipment_repository": FakeShipmentRepository(store),
        "order_type_repository": FakeOrderTypeRepository(store),
        "profile_type_repository": FakeProfileTypeRepository(store),
    }
