"""
Unit tests for unique id generation.

Tests cover:
- Auto-increment sequences per type
- UUID generation
- Collision skipping and the attempt bound
- Generator configuration errors
"""

import asyncio
import uuid

import pytest

from id_registry.errors import GeneratorNotConfiguredError, IdGenerationError
from id_registry.generators import GeneratorKind
from id_registry.models import IdPairSet
from id_registry.registry import IdRegistry
from id_registry.storage import InMemoryIdStorage


class AlwaysTakenStorage(InMemoryIdStorage):
    """Storage that reports every code as registered but holds none."""

    async def contains(self, id_type, id_code):
        return True


class TestAutoIncrement:
    """Tests for auto-increment generation."""

    @pytest.fixture
    def registry(self):
        registry = IdRegistry()
        registry.register_generator("invoice", GeneratorKind.AUTO_INCREMENT)
        return registry

    @pytest.mark.asyncio
    async def test_sequence_starts_at_one(self, registry):
        codes = [await registry.generate_id("invoice") for _ in range(3)]

        assert codes == ["1", "2", "3"]

    @pytest.mark.asyncio
    async def test_generated_ids_are_registered(self, registry):
        code = await registry.generate_id("invoice")

        assert await registry.is_registered("invoice", code)

    @pytest.mark.asyncio
    async def test_counters_independent_per_type(self, registry):
        registry.register_generator("order", GeneratorKind.AUTO_INCREMENT)

        first_invoice = await registry.generate_id("invoice")
        first_order = await registry.generate_id("order")
        second_invoice = await registry.generate_id("invoice")

        assert (first_invoice, first_order, second_invoice) == ("1", "1", "2")

    @pytest.mark.asyncio
    async def test_skips_manually_registered_codes(self, registry):
        """A code registered by hand is never generated again."""
        await registry.register(IdPairSet([("invoice", "1"), ("invoice", "2")]))

        assert await registry.generate_id("invoice") == "3"
        assert await registry.generate_id("invoice") == "4"

    @pytest.mark.asyncio
    async def test_counter_saved_in_storage(self, registry):
        await registry.generate_id("invoice")
        await registry.generate_id("invoice")

        assert await registry.storage.get_counter("invoice") == 2

    @pytest.mark.asyncio
    async def test_continues_from_stored_counter(self, registry):
        await registry.storage.set_counter("invoice", 41)

        assert await registry.generate_id("invoice") == "42"

    @pytest.mark.asyncio
    async def test_seeds_counter_from_highest_numeric_code(self):
        """Taken codes beyond the attempt bound do not block generation."""
        registry = IdRegistry(max_generate_attempts=2)
        registry.register_generator("invoice", GeneratorKind.AUTO_INCREMENT)
        await registry.register(
            IdPairSet([("invoice", str(i)) for i in range(1, 6)] + [("invoice", "draft-9")])
        )

        assert await registry.generate_id("invoice") == "6"
        assert await registry.storage.get_counter("invoice") == 6

    @pytest.mark.asyncio
    async def test_counter_ahead_of_codes_is_kept(self, registry):
        await registry.storage.set_counter("invoice", 10)
        await registry.register(IdPairSet([("invoice", "3")]))

        assert await registry.generate_id("invoice") == "11"

    @pytest.mark.asyncio
    async def test_free_next_value_skips_scan(self, registry):
        """A counter that is not behind never reads the full code set."""
        calls = []
        get_all = registry.storage.get_all

        async def counting_get_all(id_type):
            calls.append(id_type)
            return await get_all(id_type)

        registry.storage.get_all = counting_get_all
        await registry.generate_id("invoice")
        await registry.generate_id("invoice")

        assert calls == []

    @pytest.mark.asyncio
    async def test_attempt_bound(self):
        registry = IdRegistry(storage=AlwaysTakenStorage(), max_generate_attempts=3)
        registry.register_generator("invoice", GeneratorKind.AUTO_INCREMENT)

        with pytest.raises(IdGenerationError) as exc_info:
            await registry.generate_id("invoice")

        assert exc_info.value.attempts == 3
        assert exc_info.value.code == "GENERATION_FAILED"

    @pytest.mark.asyncio
    async def test_attempt_bound_keeps_progress(self):
        """After exhausting the bound, the counter stays past the scanned range."""
        storage = AlwaysTakenStorage()
        registry = IdRegistry(storage=storage, max_generate_attempts=2)
        registry.register_generator("invoice", GeneratorKind.AUTO_INCREMENT)

        with pytest.raises(IdGenerationError):
            await registry.generate_id("invoice")

        assert await storage.get_counter("invoice") == 2

    @pytest.mark.asyncio
    async def test_concurrent_generation_is_unique(self, registry):
        codes = await asyncio.gather(*(registry.generate_id("invoice") for _ in range(50)))

        assert sorted(codes, key=int) == [str(i) for i in range(1, 51)]

    @pytest.mark.asyncio
    async def test_generators_survive_clear(self, registry):
        await registry.generate_id("invoice")
        await registry.generate_id("invoice")

        await registry.clear()

        assert await registry.generate_id("invoice") == "1"


class TestUuid:
    """Tests for UUID generation."""

    @pytest.fixture
    def registry(self):
        registry = IdRegistry()
        registry.register_generator("session", GeneratorKind.UUID)
        return registry

    @pytest.mark.asyncio
    async def test_uuid_format(self, registry):
        code = await registry.generate_id("session")

        assert str(uuid.UUID(code)) == code
        assert uuid.UUID(code).version == 4

    @pytest.mark.asyncio
    async def test_many_uuids_distinct_and_registered(self, registry):
        codes = [await registry.generate_id("session") for _ in range(1000)]

        assert len(set(codes)) == 1000
        assert await registry.get_registered_codes("session") == set(codes)

    @pytest.mark.asyncio
    async def test_uuid_does_not_touch_counter(self, registry):
        await registry.generate_id("session")

        assert await registry.storage.get_counter("session") == 0


class TestGeneratorConfiguration:
    """Tests for generator registration."""

    @pytest.fixture
    def registry(self):
        return IdRegistry()

    @pytest.mark.asyncio
    async def test_missing_generator(self, registry):
        with pytest.raises(GeneratorNotConfiguredError, match="No generator registered for idType: invoice"):
            await registry.generate_id("invoice")

    def test_string_kind(self, registry):
        registry.register_generator("invoice", "uuid")

        assert registry.get_generator("invoice") is GeneratorKind.UUID

    def test_unknown_kind(self, registry):
        with pytest.raises(ValueError):
            registry.register_generator("invoice", "snowflake")

    @pytest.mark.asyncio
    async def test_replacing_generator(self, registry):
        registry.register_generator("invoice", GeneratorKind.UUID)
        registry.register_generator("invoice", GeneratorKind.AUTO_INCREMENT)

        assert await registry.generate_id("invoice") == "1"

    def test_get_generator_unknown(self, registry):
        assert registry.get_generator("invoice") is None
