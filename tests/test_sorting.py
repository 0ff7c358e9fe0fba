"""
Tests for the list sort strategies.
"""

import pytest

from vetcare.schemas import ServiceDTO, VisitDTO
from vetcare.sorting import (
    SortByDate,
    SortByName,
    SortByPrice,
    SortDirection,
    apply_sort,
    name_sort_key,
    resolve_sort_strategy,
)


@pytest.fixture
def named_items():
    return [
        {"id": 1, "name": "Žuvis"},
        {"id": 2, "name": "amber"},
        {"id": 3, "name": "Šuo"},
        {"id": 4, "name": "Bella"},
        {"id": 5, "name": "suo"},
    ]


class TestSortDirection:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("asc", SortDirection.ASC),
            ("DESC", SortDirection.DESC),
            ("descending", SortDirection.DESC),
            ("Ascending", SortDirection.ASC),
            (SortDirection.DESC, SortDirection.DESC),
        ],
    )
    def test_parse(self, value, expected):
        assert SortDirection.parse(value) is expected

    def test_parse_unknown_uses_default(self):
        assert SortDirection.parse("sideways") is SortDirection.ASC
        assert SortDirection.parse(None, SortDirection.DESC) is SortDirection.DESC


class TestResolveSortStrategy:
    @pytest.mark.parametrize(
        "key, strategy_class",
        [
            ("name", SortByName),
            ("date", SortByDate),
            ("createdAt", SortByDate),
            ("created_at", SortByDate),
            ("price", SortByPrice),
            ("totalCost", SortByPrice),
            ("total_cost", SortByPrice),
            ("unknown", SortByName),
            (None, SortByName),
        ],
    )
    def test_resolution(self, key, strategy_class):
        assert isinstance(resolve_sort_strategy(key), strategy_class)

    def test_unknown_key_sorts_like_name(self, named_items):
        assert apply_sort(named_items, "colour") == apply_sort(named_items, "name")


class TestSortByName:
    def test_case_and_accent_insensitive(self, named_items):
        ordered = [item["id"] for item in apply_sort(named_items, "name")]

        # amber, Bella, suo, Šuo, Žuvis
        assert ordered == [2, 4, 5, 3, 1]

    def test_descending(self, named_items):
        ordered = [item["id"] for item in apply_sort(named_items, "name", "desc")]

        assert ordered == [1, 3, 5, 4, 2]

    def test_falls_back_to_full_name(self):
        items = [{"fullName": "Zita Z"}, {"full_name": "Algis A"}]

        assert apply_sort(items, "name")[0] == {"full_name": "Algis A"}

    def test_does_not_mutate_input(self, named_items):
        original = list(named_items)

        result = apply_sort(named_items, "name")

        assert named_items == original
        assert result is not named_items

    def test_stable(self):
        items = [{"id": 1, "name": "Rex"}, {"id": 2, "name": "rex"}, {"id": 3, "name": "Rex"}]

        ordered = [item["id"] for item in apply_sort(items, "name")]

        assert ordered.index(1) < ordered.index(3)

    def test_name_sort_key_groups_accents(self):
        assert name_sort_key("Šuo") < name_sort_key("Tigras")
        assert name_sort_key("Šuo") > name_sort_key("Rex")


class TestSortByPrice:
    def test_numeric_order(self):
        services = [
            ServiceDTO(id=1, name="X-ray", price=120.0, category="imaging"),
            ServiceDTO(id=2, name="Exam", price=25.5, category="general"),
            ServiceDTO(id=3, name="Vaccine", price=9.99, category="general"),
        ]

        ordered = [s.id for s in apply_sort(services, "price")]

        assert ordered == [3, 2, 1]

    def test_uses_total_cost(self):
        visits = [
            VisitDTO(id=1, diagnosis="a", pet_id=1, vet_id=1, total_cost=80.0),
            VisitDTO(id=2, diagnosis="b", pet_id=1, vet_id=1, total_cost=15.0),
        ]

        ordered = [v.id for v in apply_sort(visits, "price", SortDirection.DESC)]

        assert ordered == [1, 2]

    def test_missing_and_non_numeric_are_zero(self):
        items = [{"id": 1, "price": "5"}, {"id": 2}, {"id": 3, "price": "n/a"}, {"id": 4, "price": -1}]

        ordered = [item["id"] for item in apply_sort(items, "price")]

        assert ordered == [4, 2, 3, 1]


class TestSortByDate:
    def test_missing_dates_last_in_both_directions(self):
        items = [
            {"id": 1, "date": "2025-03-10"},
            {"id": 2},
            {"id": 3, "date": "2025-01-05"},
            {"id": 4, "date": "garbage"},
        ]

        ascending = [item["id"] for item in apply_sort(items, "date", "asc")]
        descending = [item["id"] for item in apply_sort(items, "date", "desc")]

        assert ascending == [3, 1, 2, 4]
        assert descending == [1, 3, 2, 4]

    def test_falls_back_to_created_at(self):
        items = [{"id": 1, "createdAt": "2025-05-01"}, {"id": 2, "created_at": "2024-05-01"}]

        assert [item["id"] for item in apply_sort(items, "createdAt")] == [2, 1]
