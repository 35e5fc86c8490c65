"""Tests unitarios para ProfileTypeInstaller."""

import pytest

from order_profiles.core.config import Settings
from order_profiles.domain.models import FieldDefinition, ProfileTypeDefinition
from order_profiles.services.profile_migration import ProfileTypeInstaller


def build_installer(repositories) -> ProfileTypeInstaller:
    settings = Settings(BILLING_PROFILE_TYPE_LABEL="Billing", SHIPPING_PROFILE_TYPE_LABEL="Shipping")
    return ProfileTypeInstaller(repositories["profile_type_repository"], settings=settings)


class TestEnsureProfileTypes:
    """Creación de los tipos de perfil de facturación y envío."""

    @pytest.mark.asyncio
    async def test_creates_missing_types(self, store, repositories):
        """Debe crear ambos tipos con el campo base address."""
        created = await build_installer(repositories).ensure_profile_types()

        assert created == ["customer_billing", "customer_shipping"]
        assert store.profile_types["customer_billing"].label == "Billing"
        assert store.profile_types["customer_shipping"].label == "Shipping"
        assert store.fields["customer_billing"]["address"].is_base_field

    @pytest.mark.asyncio
    async def test_is_idempotent(self, store, repositories):
        """Debe no crear nada si los tipos ya existen."""
        installer = build_installer(repositories)
        await installer.ensure_profile_types()

        assert await installer.ensure_profile_types() == []

    @pytest.mark.asyncio
    async def test_keeps_existing_type(self, store, repositories):
        """Debe respetar un tipo existente y crear solo el que falta."""
        store.profile_types["customer_billing"] = ProfileTypeDefinition("customer_billing", "Custom label")

        created = await build_installer(repositories).ensure_profile_types()

        assert created == ["customer_shipping"]
        assert store.profile_types["customer_billing"].label == "Custom label"


class TestCopyCustomFields:
    """Copia de campos personalizados del tipo customer."""

    @pytest.mark.asyncio
    async def test_copies_non_base_fields_to_both_types(self, store, repositories):
        """Debe copiar phone y tax_number a billing y shipping, sin el campo base."""
        installer = build_installer(repositories)
        await installer.ensure_profile_types()

        copied = await installer.copy_custom_fields()

        assert copied == 4
        for profile_type in ("customer_billing", "customer_shipping"):
            assert set(store.fields[profile_type]) == {"address", "phone", "tax_number"}
            assert store.fields[profile_type]["phone"].profile_type == profile_type
        assert store.fields["customer_billing"]["tax_number"].settings == {"max": 32}
        assert store.fields["customer"]["phone"].profile_type == "customer"

    @pytest.mark.asyncio
    async def test_skips_fields_already_present(self, store, repositories):
        """Debe omitir campos que ya existen en el tipo destino."""
        installer = build_installer(repositories)
        await installer.ensure_profile_types()
        existing = FieldDefinition("customer_shipping", "phone", "string", "Shipping phone")
        store.fields["customer_shipping"]["phone"] = existing

        copied = await installer.copy_custom_fields()

        assert copied == 3
        assert store.fields["customer_shipping"]["phone"] is existing

    @pytest.mark.asyncio
    async def test_second_copy_is_noop(self, store, repositories):
        """Debe no copiar nada la segunda vez."""
        installer = build_installer(repositories)
        await installer.ensure_profile_types()
        await installer.copy_custom_fields()

        assert await installer.copy_custom_fields() == 0
