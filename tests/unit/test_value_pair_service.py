"""
Unit tests for build_value_pairs() and ValuePair examples.

Run: pytest tests/unit/test_value_pair_service.py -v
"""

from models.mapping import OwnedRecordPair
from services.value_pair_service import build_value_pairs

from tests.factories import RecordFactory, value_pair


class TestBuildValuePairs:
    """Tests for build_value_pairs()"""

    def test_one_pair_per_loaded_record_pair(self, owned_pairs):
        pairs = build_value_pairs(owned_pairs, "attributes/ri:mail", "emailAddress")

        assert len(pairs) == 2
        assert pairs[0].source_values == ("jdoe@example.com",)
        assert pairs[0].target_values == ("jdoe@example.com",)

    def test_missing_items_give_empty_values(self):
        """Missing source or target never yields None."""
        loaded = [OwnedRecordPair(
            account=RecordFactory.account(attributes={}),
            owner=RecordFactory.subject()
        )]

        pairs = build_value_pairs(loaded, "attributes/ri:mail", "emailAddress")

        assert pairs[0].source_values == ()
        assert pairs[0].target_values == ()

    def test_sizes_may_differ(self):
        loaded = [OwnedRecordPair(
            account=RecordFactory.account(attributes={"cn": ["John Doe"]}),
            owner=RecordFactory.subject(givenName="John", familyName="Doe", nicknames=["JD", "Johnny"])
        )]

        pairs = build_value_pairs(loaded, "attributes/ri:cn", "nicknames")

        assert len(pairs[0].source_values) == 1
        assert len(pairs[0].target_values) == 2

    def test_no_loaded_pairs_returns_empty(self):
        assert build_value_pairs([], "attributes/ri:mail", "emailAddress") == []


class TestValuePairToExample:
    """Tests for ValuePair.to_example()"""

    def test_values_are_stringified_and_nulls_dropped(self):
        pair = value_pair([1001, None], ["1001"])

        example = pair.to_example("employeeNumber", "personalNumber")

        assert example.application.name == "employeeNumber"
        assert example.application.values == ["1001"]
        assert example.midpoint.name == "personalNumber"
        assert example.midpoint.values == ["1001"]
