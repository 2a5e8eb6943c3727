# =============================================================================
# tests/test_guitar_service.py - Guitar Service Tests
# =============================================================================
# Runs GuitarService against the in-memory Supabase client.
#
# Sample rows (see conftest.sample_guitar_rows):
#   g-1 Fender Precision Bass   bass       450.00   available
#   g-2 Music Man StingRay      bass       900.00   reserved
#   g-3 Gibson Les Paul         electric  2499.00   available
#   g-4 Yamaha C40              classical  149.99   sold   ("gibson strap")
# =============================================================================

from decimal import Decimal

import pytest

from app.exceptions import GuitarNotFoundError, GuitarStoreError
from core.models.guitar import (
    GuitarFilters,
    GuitarStatus,
    validate_filters,
    validate_guitar_create,
    validate_guitar_update,
)


def _ids(guitars) -> list[str]:
    return [guitar.id for guitar in guitars]


# =============================================================================
# Reads
# =============================================================================

class TestListAndGet:

    def test_list_returns_every_guitar(self, seeded_service):
        assert _ids(seeded_service.list_guitars()) == ["g-1", "g-2", "g-3", "g-4"]

    def test_list_empty_table(self, guitar_service):
        assert guitar_service.list_guitars() == []

    def test_get_guitar(self, seeded_service):
        guitar = seeded_service.get_guitar("g-3")

        assert guitar.brand == "Gibson"
        assert guitar.image_urls == ["/objects/uploads/lp-back"]

    def test_get_unknown_guitar(self, seeded_service):
        with pytest.raises(GuitarNotFoundError) as exc_info:
            seeded_service.get_guitar("never-created")

        assert exc_info.value.status_code == 404
        assert exc_info.value.details == {"guitar_id": "never-created"}


class TestFilterGuitars:

    def test_empty_filters_match_list(self, seeded_service):
        assert _ids(seeded_service.filter_guitars(GuitarFilters())) == _ids(seeded_service.list_guitars())

    def test_type_and_max_price(self, seeded_service):
        filters = validate_filters({"type": "bass", "maxPrice": "500"})
        assert _ids(seeded_service.filter_guitars(filters)) == ["g-1"]

    def test_price_bounds_are_inclusive(self, seeded_service):
        filters = validate_filters({"minPrice": "450", "maxPrice": "900"})
        assert _ids(seeded_service.filter_guitars(filters)) == ["g-1", "g-2"]

    def test_min_above_max_matches_nothing(self, seeded_service):
        filters = validate_filters({"minPrice": "1000", "maxPrice": "100"})
        assert seeded_service.filter_guitars(filters) == []

    def test_brand_and_status(self, seeded_service):
        filters = GuitarFilters(brand="Gibson", status="available")
        assert _ids(seeded_service.filter_guitars(filters)) == ["g-3"]

    def test_unknown_type_matches_nothing(self, seeded_service):
        assert seeded_service.filter_guitars(GuitarFilters(type="ukulele")) == []

    def test_adding_a_filter_never_widens(self, seeded_service):
        broad = set(_ids(seeded_service.filter_guitars(GuitarFilters(type="bass"))))
        narrow = set(_ids(seeded_service.filter_guitars(GuitarFilters(type="bass", status="available"))))

        assert narrow <= broad
        assert narrow == {"g-1"}


class TestSearchGuitars:

    def test_search_is_case_insensitive(self, seeded_service):
        lower = _ids(seeded_service.search_guitars("gibson"))
        upper = _ids(seeded_service.search_guitars("GIBSON"))

        assert lower == upper == ["g-3", "g-4"]

    def test_matches_model_and_color(self, seeded_service):
        assert _ids(seeded_service.search_guitars("stingray")) == ["g-2"]
        assert _ids(seeded_service.search_guitars("cherry")) == ["g-3"]

    def test_null_description_is_not_an_error(self, seeded_service):
        # g-2 has no description but still matches on color
        assert _ids(seeded_service.search_guitars("black")) == ["g-2"]

    def test_wildcards_match_literally(self, seeded_service):
        assert seeded_service.search_guitars("C_0") == []
        assert seeded_service.search_guitars("%") == []

    def test_asterisk_matches_literally(self, seeded_service):
        assert seeded_service.search_guitars("*") == []
        assert seeded_service.search_guitars("Les*Paul") == []

    def test_multi_word_substring(self, seeded_service):
        assert _ids(seeded_service.search_guitars("les paul")) == ["g-3"]

    def test_regex_characters_match_literally(self, seeded_service):
        assert seeded_service.search_guitars("Les.Paul") == []
        assert seeded_service.search_guitars("(") == []

    def test_search_sends_one_or_expression(self, seeded_service, supabase):
        seeded_service.search_guitars("strat")

        assert len(supabase.or_expressions) == 1
        assert supabase.or_expressions[0].startswith('brand.imatch."strat"')


class TestFindGuitars:

    def test_search_overrides_filters(self, seeded_service):
        guitars = seeded_service.find_guitars(search="gibson", filters=GuitarFilters(type="bass"))
        assert _ids(guitars) == ["g-3", "g-4"]

    def test_empty_search_falls_back_to_filters(self, seeded_service):
        guitars = seeded_service.find_guitars(search="", filters=GuitarFilters(type="bass"))
        assert _ids(guitars) == ["g-1", "g-2"]

    def test_nothing_given_lists_all(self, seeded_service):
        assert len(seeded_service.find_guitars()) == 4


# =============================================================================
# Writes
# =============================================================================

class TestCreateGuitar:

    def test_create_assigns_id_and_default_status(self, guitar_service, sample_guitar_payload):
        guitar = guitar_service.create_guitar(validate_guitar_create(sample_guitar_payload))

        assert guitar.id
        assert guitar.status == GuitarStatus.AVAILABLE
        assert guitar.price == Decimal("1200.00")

    def test_created_guitar_can_be_fetched(self, guitar_service, sample_guitar_payload):
        created = guitar_service.create_guitar(validate_guitar_create(sample_guitar_payload))
        assert guitar_service.get_guitar(created.id) == created

    def test_ids_are_unique(self, guitar_service, sample_guitar_payload):
        data = validate_guitar_create(sample_guitar_payload)
        first = guitar_service.create_guitar(data)
        second = guitar_service.create_guitar(data)

        assert first.id != second.id


class TestUpdateGuitar:

    def test_partial_update(self, seeded_service):
        guitar = seeded_service.update_guitar("g-1", validate_guitar_update({"price": "399.99", "status": "reserved"}))

        assert guitar.price == Decimal("399.99")
        assert guitar.status == GuitarStatus.RESERVED
        assert guitar.brand == "Fender"

    def test_empty_update_returns_current(self, seeded_service):
        before = seeded_service.get_guitar("g-2")
        assert seeded_service.update_guitar("g-2", validate_guitar_update({})) == before

    def test_update_unknown_guitar(self, seeded_service):
        with pytest.raises(GuitarNotFoundError):
            seeded_service.update_guitar("never-created", validate_guitar_update({"color": "Red"}))


class TestDeleteGuitar:

    def test_delete(self, seeded_service):
        seeded_service.delete_guitar("g-4")

        with pytest.raises(GuitarNotFoundError):
            seeded_service.get_guitar("g-4")
        assert len(seeded_service.list_guitars()) == 3

    def test_delete_unknown_guitar(self, seeded_service):
        with pytest.raises(GuitarNotFoundError):
            seeded_service.delete_guitar("never-created")


# =============================================================================
# Store Failures
# =============================================================================

class TestStoreErrors:

    def test_read_failure_is_generic(self, seeded_service, supabase):
        supabase.error = RuntimeError("connection refused to 10.0.0.5")

        with pytest.raises(GuitarStoreError) as exc_info:
            seeded_service.list_guitars()

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Failed to fetch guitars"
        assert "10.0.0.5" not in str(exc_info.value.to_dict())

    def test_write_failure(self, guitar_service, supabase, sample_guitar_payload):
        supabase.error = RuntimeError("insert failed")

        with pytest.raises(GuitarStoreError):
            guitar_service.create_guitar(validate_guitar_create(sample_guitar_payload))
