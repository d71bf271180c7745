"""Tests for the owner-scoped food service."""

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from foodlens.domain.auth import RequestContext
from foodlens.domain.errors import NotFoundError
from foodlens.domain.food import FoodEntryUpdate, MealType
from foodlens.services.food import FoodService
from tests.conftest import InMemoryFoodRepository, make_draft, make_user


def _service() -> FoodService:
    return FoodService(InMemoryFoodRepository())


def _context(email: str = "user@test.com") -> RequestContext:
    return RequestContext(user=make_user(email), access_token=f"token-{email}")


def test_create_then_get_round_trips() -> None:
    service = _service()
    context = _context()

    created = service.create(context, make_draft(meal_type=MealType.BREAKFAST))
    fetched = service.get(context, str(created.id))

    assert fetched == created
    assert fetched.user_id == context.user_id
    assert fetched.meal_type is MealType.BREAKFAST


def test_create_defaults_timestamp_to_now() -> None:
    service = _service()
    before = datetime.now(tz=UTC)

    created = service.create(_context(), make_draft())

    assert created.timestamp >= before


def test_create_keeps_supplied_timestamp() -> None:
    service = _service()
    eaten_at = datetime(2026, 1, 5, 8, 0, tzinfo=UTC)

    created = service.create(_context(), make_draft(timestamp=eaten_at))

    assert created.timestamp == eaten_at


def test_list_returns_newest_first_for_owner_only() -> None:
    service = _service()
    owner = _context()
    other = _context("other@test.com")
    older = service.create(
        owner, make_draft(timestamp=datetime(2026, 1, 1, tzinfo=UTC))
    )
    newer = service.create(
        owner, make_draft(timestamp=datetime(2026, 1, 2, tzinfo=UTC))
    )
    service.create(other, make_draft())

    entries = service.list_entries(owner)

    assert [entry.id for entry in entries] == [newer.id, older.id]


def test_other_users_entry_is_not_found() -> None:
    service = _service()
    created = service.create(_context(), make_draft())
    stranger = _context("other@test.com")

    with pytest.raises(NotFoundError):
        service.get(stranger, created.id)
    with pytest.raises(NotFoundError):
        service.update(stranger, created.id, FoodEntryUpdate(notes="mine now"))
    with pytest.raises(NotFoundError):
        service.delete(stranger, created.id)


def test_invalid_id_is_not_found() -> None:
    service = _service()

    with pytest.raises(NotFoundError):
        service.get(_context(), "not-a-uuid")


def test_update_applies_only_given_fields() -> None:
    service = _service()
    context = _context()
    created = service.create(
        context, make_draft(meal_type=MealType.LUNCH, notes="with salad")
    )

    updated = service.update(
        context, created.id, FoodEntryUpdate(meal_type=MealType.DINNER)
    )

    assert updated.meal_type is MealType.DINNER
    assert updated.notes == "with salad"
    assert updated.identified_food == created.identified_food


def test_empty_update_returns_existing_entry() -> None:
    service = _service()
    context = _context()
    created = service.create(context, make_draft())

    assert service.update(context, created.id, FoodEntryUpdate()) == created


def test_double_delete_reports_not_found() -> None:
    service = _service()
    context = _context()
    created = service.create(context, make_draft())

    service.delete(context, created.id)

    with pytest.raises(NotFoundError) as exc_info:
        service.delete(context, created.id)
    assert exc_info.value.message == "Food entry not found"


def test_missing_entry_is_not_found() -> None:
    with pytest.raises(NotFoundError):
        _service().get(_context(), uuid4())
