"""Tests de los repositorios SQL contra SQLite en memoria (aiosqlite)."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from order_profiles.db.connection import ConnDB
from order_profiles.db.repositories import (
    OrderRepository,
    OrderTypeRepository,
    ProfileRepository,
    ProfileTypeRepository,
    ShipmentRepository,
)
from order_profiles.db.repositories import base as repository_base
from order_profiles.db.repositories.base import is_connection_error
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
from order_profiles.services.profile_migration import InProcessBatchRunner, create_switcher
from order_profiles.utils.error_handler import PersistenceException, ValidationException

IN_MEMORY_URL = "sqlite+aiosqlite://"


async def connect() -> tuple[ConnDB, dict]:
    conn_db = ConnDB(IN_MEMORY_URL)
    await conn_db.initialize(create_schema=True)
    repositories = {
        "order_repository": OrderRepository(conn_db),
        "profile_repository": ProfileRepository(conn_db),
        "shipment_repository": ShipmentRepository(conn_db),
        "order_type_repository": OrderTypeRepository(conn_db),
        "profile_type_repository": ProfileTypeRepository(conn_db),
    }
    for repository in repositories.values():
        await repository.initialize()
    return conn_db, repositories


async def seed_order(repositories, order_id: int, shared: bool, order_type: str = "default") -> Order:
    profiles = repositories["profile_repository"]
    billing = await profiles.save(
        Profile(type=ProfileType.COMMON, address=Address(country_code="US", locality=f"City {order_id}"))
    )
    shipping = billing
    if not shared:
        shipping = await profiles.save(
            Profile(type=ProfileType.COMMON, address=Address(country_code="US", locality="Elsewhere"))
        )

    order = Order(id=order_id, order_type_id=order_type, billing_profile=billing)
    await repositories["order_repository"].save(order)
    shipment = await repositories["shipment_repository"].save(Shipment(order_id=order_id, shipping_profile=shipping))
    order.shipments.append(shipment)
    return order


class TestConnection:
    """Tests para ConnDB."""

    @pytest.mark.asyncio
    async def test_initialize_and_health_check(self):
        """Debe inicializar la conexión y crear el esquema."""
        conn_db, repositories = await connect()
        try:
            health = await conn_db.health_check()
            assert health["connection_initialized"] is True
            assert health["test_passed"] is True
            assert (await repositories["order_repository"].health_check())["status"] == "healthy"
        finally:
            await conn_db.close()

        assert not conn_db.is_initialized()

    @pytest.mark.asyncio
    async def test_repository_requires_initialization(self):
        """Debe fallar al pedir sesión sin inicializar el repositorio."""
        repository = ProfileRepository(ConnDB(IN_MEMORY_URL))

        with pytest.raises(PersistenceException) as exc_info:
            repository.get_session()

        assert exc_info.value.connection_level


class TestProfileRepository:
    """Tests para ProfileRepository."""

    @pytest.mark.asyncio
    async def test_insert_then_update(self):
        """Debe asignar un ID al insertar y mantenerlo al actualizar."""
        conn_db, repositories = await connect()
        try:
            profiles = repositories["profile_repository"]
            profile = await profiles.save(
                Profile(type=ProfileType.COMMON, address=Address(country_code="us", given_name="Ada"), uid=3)
            )
            assert profile.id is not None

            profile.relabel(ProfileType.BILLING)
            await profiles.save(profile)

            loaded = await profiles.load(profile.id)
            assert loaded == profile
            assert loaded.address.country_code == "US"
        finally:
            await conn_db.close()

    @pytest.mark.asyncio
    async def test_duplicate_gets_fresh_id_on_save(self):
        """Debe guardar la copia como un registro nuevo."""
        conn_db, repositories = await connect()
        try:
            profiles = repositories["profile_repository"]
            original = await profiles.save(Profile(type=ProfileType.COMMON, address=Address(country_code="US")))

            copy = await profiles.duplicate(original)
            assert copy.id is None
            await profiles.save(copy)

            assert copy.id != original.id
            assert (await profiles.load(copy.id)).address == original.address
        finally:
            await conn_db.close()

    @pytest.mark.asyncio
    async def test_load_missing_profile(self):
        """Debe devolver None si el perfil no existe."""
        conn_db, repositories = await connect()
        try:
            assert await repositories["profile_repository"].load(404) is None
        finally:
            await conn_db.close()


class TestOrderRepository:
    """Tests para OrderRepository."""

    @pytest.mark.asyncio
    async def test_load_shares_profile_instances(self):
        """Debe devolver el mismo objeto Profile para el mismo ID."""
        conn_db, repositories = await connect()
        try:
            await seed_order(repositories, 1, shared=True)

            order = await repositories["order_repository"].load(1)

            assert order.billing_profile is order.shipments[0].shipping_profile
            assert order.billing_profile.address.locality == "City 1"
        finally:
            await conn_db.close()

    @pytest.mark.asyncio
    async def test_load_missing_order(self):
        """Debe devolver None si el pedido no existe."""
        conn_db, repositories = await connect()
        try:
            assert await repositories["order_repository"].load(99) is None
        finally:
            await conn_db.close()

    @pytest.mark.asyncio
    async def test_query_by_order_type(self):
        """Debe devolver los IDs del tipo de pedido en orden ascendente."""
        conn_db, repositories = await connect()
        try:
            await seed_order(repositories, 3, shared=True)
            await seed_order(repositories, 1, shared=False)
            await seed_order(repositories, 2, shared=True, order_type="online")

            assert await repositories["order_repository"].query("default") == [1, 3]
            assert await repositories["order_repository"].count("default") == 2
            assert await repositories["order_repository"].count("online") == 1
        finally:
            await conn_db.close()


class TestRetry:
    """Reintentos ante caídas de conexión."""

    def test_connection_errors_are_classified(self):
        """Debe distinguir errores de conexión de errores del registro."""
        dropped = OperationalError("SELECT 1", {}, Exception("server closed the connection unexpectedly"))
        duplicate = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        assert is_connection_error(dropped)
        assert not is_connection_error(duplicate)
        assert not is_connection_error(ValueError("bad row"))

    @pytest.mark.asyncio
    async def test_load_retries_after_connection_drop(self, monkeypatch):
        """Debe reintentar la lectura si la conexión se cae una vez."""
        monkeypatch.setattr(repository_base.settings, "RETRY_DELAY_SECONDS", 0.0)
        conn_db, repositories = await connect()
        try:
            await seed_order(repositories, 1, shared=True)
            orders = repositories["order_repository"]
            open_session = orders.get_session
            attempts = []

            def flaky_session():
                attempts.append(1)
                if len(attempts) == 1:
                    raise OperationalError("SELECT", {}, Exception("server closed the connection unexpectedly"))
                return open_session()

            monkeypatch.setattr(orders, "get_session", flaky_session)

            order = await orders.load(1)

            assert len(attempts) == 2
            assert order.id == 1
        finally:
            await conn_db.close()

    @pytest.mark.asyncio
    async def test_save_errors_are_not_connection_level(self):
        """Debe marcar como no reintentable un fallo de restricción al guardar."""
        conn_db, repositories = await connect()
        try:
            profile_types = repositories["profile_type_repository"]
            await profile_types.create(ProfileTypeDefinition("customer", "Customer"))

            with pytest.raises(PersistenceException) as exc_info:
                await profile_types.create(ProfileTypeDefinition("customer", "Customer"))

            assert exc_info.value.connection_level is False
        finally:
            await conn_db.close()

    @pytest.mark.asyncio
    async def test_zero_max_retries_still_runs_once(self, monkeypatch):
        """Debe ejecutar la consulta al menos una vez aunque MAX_RETRIES sea 0."""
        monkeypatch.setattr(repository_base.settings, "MAX_RETRIES", 0)
        conn_db, repositories = await connect()
        try:
            await seed_order(repositories, 1, shared=True)

            assert await repositories["order_repository"].query("default") == [1]
            assert await repositories["order_repository"].query("missing") == []
            assert (await repositories["order_repository"].load(1)).id == 1
        finally:
            await conn_db.close()


class TestOrderTypeRepository:
    """Tests para OrderTypeRepository."""

    @pytest.mark.asyncio
    async def test_switch_cannot_be_reverted(self):
        """Debe rechazar guardar False sobre True."""
        conn_db, repositories = await connect()
        try:
            order_types = repositories["order_type_repository"]
            order_type = OrderType(id="default", label="Default")
            await order_types.save(order_type)

            order_type.enable_multiple_profile_types()
            await order_types.save(order_type)
            assert (await order_types.load("default")).use_multiple_profile_types is True

            with pytest.raises(ValidationException):
                await order_types.save(OrderType(id="default", label="Default"))

            assert (await order_types.load("default")).use_multiple_profile_types is True
        finally:
            await conn_db.close()


class TestProfileTypeRepository:
    """Tests para ProfileTypeRepository."""

    @pytest.mark.asyncio
    async def test_create_and_list_fields(self):
        """Debe guardar el tipo y sus definiciones de campo."""
        conn_db, repositories = await connect()
        try:
            profile_types = repositories["profile_type_repository"]
            await profile_types.create(
                ProfileTypeDefinition("customer", "Customer"),
                fields=[FieldDefinition("customer", "address", "address", "Address", is_base_field=True)],
            )
            await profile_types.add_field_definition(
                FieldDefinition("customer", "phone", "telephone", "Phone", settings={"max": 20})
            )

            fields = await profile_types.get_field_definitions("customer")

            assert (await profile_types.load("customer")).label == "Customer"
            assert list(fields) == ["address", "phone"]
            assert fields["address"].is_base_field is True
            assert fields["phone"].settings == {"max": 20}
            assert await profile_types.load("customer_billing") is None
        finally:
            await conn_db.close()


class TestEndToEndSwitch:
    """Migración completa sobre SQLite."""

    @pytest.mark.asyncio
    async def test_switch_order_type(self):
        """Debe dividir perfiles compartidos, re-etiquetar y activar el flag."""
        conn_db, repositories = await connect()
        try:
            await repositories["order_type_repository"].save(OrderType(id="default", label="Default"))
            await repositories["profile_type_repository"].create(
                ProfileTypeDefinition("customer", "Customer"),
                fields=[
                    FieldDefinition("customer", "address", "address", "Address", is_base_field=True),
                    FieldDefinition("customer", "phone", "telephone", "Phone"),
                ],
            )
            shared = await seed_order(repositories, 1, shared=True)
            distinct = await seed_order(repositories, 2, shared=False)

            switcher = create_switcher(
                **repositories, scheduler=InProcessBatchRunner(use_checkpoints=False), chunk_size=1
            )
            report = await switcher.switch("default")

            assert report.success
            assert report.migrated_ids == [1, 2]

            order_1 = await repositories["order_repository"].load(1)
            assert order_1.billing_profile.id == shared.billing_profile.id
            assert order_1.billing_profile.type == ProfileType.BILLING
            assert order_1.shipments[0].shipping_profile.id == report.created_profile_ids[0]
            assert order_1.shipments[0].shipping_profile.type == ProfileType.SHIPPING
            assert order_1.shipments[0].shipping_profile.address == shared.billing_profile.address

            order_2 = await repositories["order_repository"].load(2)
            assert order_2.shipments[0].shipping_profile.id == distinct.shipments[0].shipping_profile.id
            assert order_2.shipments[0].shipping_profile.type == ProfileType.SHIPPING

            assert (await repositories["order_type_repository"].load("default")).use_multiple_profile_types
            shipping_fields = await repositories["profile_type_repository"].get_field_definitions("customer_shipping")
            assert set(shipping_fields) == {"address", "phone"}
        finally:
            await conn_db.close()
