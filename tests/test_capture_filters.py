"""
Testes dos predicados de pesquisa de capturas.
"""
import uuid
from datetime import datetime

import pytest
from sqlalchemy.sql.elements import True_

from app.models.capture import TENANT_MODELS
from app.schemas.search import FiltersRequest
from app.services.capture_filters import (
    build_capture_predicate,
    clean_string_list,
    clean_uuid_list,
    contains_any,
    date_between,
    direction_exact,
    ids_exact_any,
)

CaptureCmp, UserCmp = TENANT_MODELS["CMP"]

JAN_1 = datetime(2024, 1, 1, 0, 0, 0)
JAN_31 = datetime(2024, 1, 31, 23, 59, 59)


def count_matching(registry, predicate) -> int:
    binding = registry.resolve("CMP")
    db = binding.session_factory()
    try:
        return db.query(binding.capture_model).filter(predicate).count()
    finally:
        db.close()


@pytest.mark.unit
class TestCleaning:
    """Limpeza das listas de filtros."""

    def test_clean_string_list_drops_null_and_blank(self):
        assert clean_string_list([None, "", "   ", " Foo ", "BAR"]) == ["foo", "bar"]

    def test_clean_string_list_none(self):
        assert clean_string_list(None) == []

    def test_clean_uuid_list_removes_duplicates(self):
        first, second = uuid.uuid4(), uuid.uuid4()
        assert clean_uuid_list([first, None, second, first]) == [first, second]


@pytest.mark.unit
class TestClauses:
    """Cláusulas individuais sem restrição quando o filtro está vazio."""

    def test_empty_lists_are_unconstrained(self):
        assert isinstance(ids_exact_any(CaptureCmp.object_id, [None]), True_)
        assert isinstance(contains_any(CaptureCmp.extension_num, ["", "  "]), True_)
        assert isinstance(date_between(CaptureCmp.date_added, None, None), True_)

    @pytest.mark.parametrize("direction", [None, -1, 2, 7])
    def test_out_of_range_direction_is_ignored(self, direction):
        assert isinstance(direction_exact(CaptureCmp.direction, direction), True_)

    @pytest.mark.parametrize("direction", [0, 1])
    def test_valid_direction_is_constrained(self, direction):
        assert not isinstance(direction_exact(CaptureCmp.direction, direction), True_)


class TestBuildCapturePredicate:
    """Predicado completo avaliado contra a base da OPCO."""

    def test_date_range_is_inclusive(self, registry, seeder):
        seeder.capture("CMP", JAN_1)
        seeder.capture("CMP", JAN_31)
        seeder.capture("CMP", datetime(2024, 2, 1))

        predicate = build_capture_predicate(CaptureCmp, UserCmp, JAN_1, JAN_31)
        assert count_matching(registry, predicate) == 2

    def test_single_bound(self, registry, seeder):
        seeder.capture("CMP", datetime(2023, 12, 31))
        seeder.capture("CMP", datetime(2024, 1, 15))

        predicate = build_capture_predicate(CaptureCmp, UserCmp, JAN_1, None)
        assert count_matching(registry, predicate) == 1

    def test_blank_filters_equal_no_filters(self, registry, seeder):
        for day in range(1, 6):
            seeder.capture("CMP", datetime(2024, 1, day), direction=str(day % 2))

        blank = FiltersRequest(
            object_ids=[None],
            extension_num=[None, ""],
            channel_num=["  "],
            ani_ali_digits=[],
            name=[None, " "]
        )

        without = count_matching(registry, build_capture_predicate(CaptureCmp, UserCmp, JAN_1, JAN_31))
        with_blank = count_matching(
            registry, build_capture_predicate(CaptureCmp, UserCmp, JAN_1, JAN_31, blank)
        )
        assert without == with_blank == 5

    def test_object_ids(self, registry, seeder):
        wanted = seeder.capture("CMP", datetime(2024, 1, 10))
        seeder.capture("CMP", datetime(2024, 1, 11))

        filters = FiltersRequest(object_ids=[wanted, wanted])
        predicate = build_capture_predicate(CaptureCmp, UserCmp, JAN_1, JAN_31, filters)
        assert count_matching(registry, predicate) == 1

    def test_substring_filters_are_case_insensitive(self, registry, seeder):
        seeder.capture("CMP", datetime(2024, 1, 10), extension_num="EXT-4410", ani_ali_digits="2075551234")
        seeder.capture("CMP", datetime(2024, 1, 11), extension_num="ext-9000", ani_ali_digits="6035550000")

        filters = FiltersRequest(extension_num=["ext-44"])
        predicate = build_capture_predicate(CaptureCmp, UserCmp, JAN_1, JAN_31, filters)
        assert count_matching(registry, predicate) == 1

        filters = FiltersRequest(ani_ali_digits=["555"])
        predicate = build_capture_predicate(CaptureCmp, UserCmp, JAN_1, JAN_31, filters)
        assert count_matching(registry, predicate) == 2

    def test_channel_number_substring(self, registry, seeder):
        seeder.capture("CMP", datetime(2024, 1, 10), channel_num=1204)
        seeder.capture("CMP", datetime(2024, 1, 11), channel_num=77)

        filters = FiltersRequest(channel_num=["20", "99"])
        predicate = build_capture_predicate(CaptureCmp, UserCmp, JAN_1, JAN_31, filters)
        assert count_matching(registry, predicate) == 1

    def test_name_join(self, registry, seeder):
        smith = seeder.user("CMP", "John Smith")
        doe = seeder.user("CMP", "Jane Doe")
        seeder.capture("CMP", datetime(2024, 1, 10), user_id=smith)
        seeder.capture("CMP", datetime(2024, 1, 11), user_id=doe)
        seeder.capture("CMP", datetime(2024, 1, 12))

        filters = FiltersRequest(name=["SMITH"])
        predicate = build_capture_predicate(CaptureCmp, UserCmp, JAN_1, JAN_31, filters)
        assert count_matching(registry, predicate) == 1

    def test_resolved_user_ids_replace_name_join(self, registry, seeder):
        smith = seeder.user("CMP", "John Smith")
        doe = seeder.user("CMP", "Jane Doe")
        seeder.capture("CMP", datetime(2024, 1, 10), user_id=smith)
        seeder.capture("CMP", datetime(2024, 1, 11), user_id=doe)

        filters = FiltersRequest(name=["nobody"])
        predicate = build_capture_predicate(
            CaptureCmp, UserCmp, JAN_1, JAN_31, filters, user_ids={doe}
        )
        assert count_matching(registry, predicate) == 1
