"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_booking_schema(self):
        from booking_core.schemas.booking_schema import (
            Booking, BookingRequest, BookingStatus, OCCUPYING_STATUSES,
        )
        assert BookingStatus.PENDING == "pending"
        assert BookingStatus.CANCELLED not in OCCUPYING_STATUSES

    def test_import_catalog_schema(self):
        from booking_core.schemas.catalog_schema import Provider, WorkingHoursEntry
        entry = WorkingHoursEntry()
        assert entry.is_open is False
        assert Provider(id="X").hours_for(3).slots == []

    def test_import_review_schema(self):
        from booking_core.schemas.review_schema import Review, ReviewRequest
        assert ReviewRequest is not None


class TestSchedulingImports:
    def test_package_reexports(self):
        from booking_core.scheduling import (
            AvailabilityResolver, BookingService, InMemoryBookingLedger,
            KeyedLockRegistry, ReviewAggregator, SlotGenerator,
        )
        assert callable(SlotGenerator().generate)

    def test_all_is_complete(self):
        import booking_core.scheduling as scheduling
        for name in scheduling.__all__:
            assert hasattr(scheduling, name)


class TestToolImports:
    def test_import_catalog(self):
        from booking_core.tools.catalog import PROVIDER_SEED, SERVICE_SEED, default_catalog
        assert len(PROVIDER_SEED) == 3
        assert len(SERVICE_SEED) == 12

    def test_import_operations(self):
        from booking_core.tools.operations import get_availability, post_booking
        assert callable(get_availability)
        assert callable(post_booking)


class TestConfigImport:
    def test_import_config(self):
        from booking_core.config import settings
        assert settings.scheduling.slot_granularity_minutes >= 1
        assert settings.scheduling.lock_timeout_sec > 0
        assert settings.app_name is not None


class TestConsoleDemo:
    def test_console_session_imports(self):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        assert session.system.catalog.get_provider("2").business_name == "Arabian Glow Spa"
        assert session.day.count("-") == 2


class TestPackaging:
    def test_only_the_package_is_installed(self):
        import tomllib
        from pathlib import Path

        pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"
        config = tomllib.loads(pyproject.read_text())
        setuptools_config = config["tool"]["setuptools"]
        assert "py-modules" not in setuptools_config
        assert setuptools_config["packages"]["find"]["include"] == ["booking_core*"]
