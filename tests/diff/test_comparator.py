"""Tests for the recursive value comparator."""

import pytest
from plandiff.config.models import PerformanceLimits
from plandiff.contracts.property_changes import PropertyAction, UnknownKind
from plandiff.diff.comparator import ValueComparator, compare_values
from plandiff.diff.paths import Path
from plandiff.diff.values import Value, NULL, SENSITIVE_PLACEHOLDER, UNKNOWN_PLACEHOLDER


def _summary(analysis):
    return [(str(c.path), c.action, c.before.to_json(), c.after.to_json()) for c in analysis.changes]


class TestValueComparator:
    """Test before/after comparison."""

    def test_identical_values_produce_no_changes(self):
        """Test deep-equal inputs give zero changes."""
        state = {"a": 1, "b": {"x": [1, 2, {"y": None}]}, "c": "text"}
        analysis = compare_values(state, dict(state))
        assert analysis.count == 0
        assert analysis.changes == []
        assert not analysis.truncated

    def test_scenario_update_and_add(self):
        """Test update of a scalar and addition of a key, nested equal map untouched."""
        analysis = compare_values({"a": 1, "b": {"x": 1}}, {"a": 2, "b": {"x": 1}, "c": 3})
        assert _summary(analysis) == [
            ("a", PropertyAction.UPDATE, 1, 2),
            ("c", PropertyAction.ADD, None, 3),
        ]
        assert analysis.changes[0].path == Path.of("a")
        assert analysis.count == 2

    def test_removed_key(self):
        """Test key only in before is a removal."""
        analysis = compare_values({"a": 1, "b": 2}, {"a": 1})
        assert _summary(analysis) == [("b", PropertyAction.REMOVE, 2, None)]

    def test_null_and_absent_are_equivalent(self):
        """Test a null value and a missing key are not a change."""
        assert compare_values({"a": None}, {}).count == 0
        assert compare_values({}, {"a": None}).count == 0

    def test_nested_maps_recurse(self):
        """Test nested differences are reported at their full path."""
        analysis = compare_values(
            {"tags": {"Name": "web", "Env": "dev"}},
            {"tags": {"Name": "web", "Env": "prod"}},
        )
        assert _summary(analysis) == [("tags.Env", PropertyAction.UPDATE, "dev", "prod")]
        assert analysis.changes[0].name == "Env"

    def test_lists_align_by_index(self):
        """Test list elements are compared index by index."""
        analysis = compare_values({"l": [1, 2, 3]}, {"l": [1, 5]})
        assert _summary(analysis) == [
            ("l[1]", PropertyAction.UPDATE, 2, 5),
            ("l[2]", PropertyAction.REMOVE, 3, None),
        ]

    def test_list_growth(self):
        """Test indices only in after are additions."""
        analysis = compare_values({"l": ["a"]}, {"l": ["a", "b"]})
        assert _summary(analysis) == [("l[1]", PropertyAction.ADD, None, "b")]

    def test_type_mismatch_is_update(self):
        """Test a kind change at the same path is a single update."""
        analysis = compare_values({"port": "80"}, {"port": 80})
        assert _summary(analysis) == [("port", PropertyAction.UPDATE, "80", 80)]

        analysis = compare_values({"cfg": {"a": 1}}, {"cfg": [1]})
        assert _summary(analysis) == [("cfg", PropertyAction.UPDATE, {"a": 1}, [1])]

    def test_nested_container_addition_is_one_change(self):
        """Test a whole new block below the root is reported once."""
        analysis = compare_values({"a": 1}, {"a": 1, "block": {"x": 1, "y": 2}})
        assert _summary(analysis) == [("block", PropertyAction.ADD, None, {"x": 1, "y": 2})]

    def test_create_reports_each_top_level_property(self):
        """Test a resource without before state lists its properties individually."""
        analysis = compare_values(None, {"b": 2, "a": 1})
        assert _summary(analysis) == [
            ("a", PropertyAction.ADD, None, 1),
            ("b", PropertyAction.ADD, None, 2),
        ]

    def test_delete_reports_each_top_level_property(self):
        """Test a resource without after state lists removals."""
        analysis = compare_values({"id": "i-1"}, None)
        assert _summary(analysis) == [("id", PropertyAction.REMOVE, "i-1", None)]

    def test_base_path_prefixes_changes(self):
        """Test changes are reported below the base path."""
        analysis = compare_values({"a": 1}, {"a": 2}, base_path=Path.of("outputs"))
        assert analysis.changes[0].path == Path.of("outputs", "a")

    def test_map_order_is_lexical(self):
        """Test map keys are visited in sorted order."""
        analysis = compare_values({}, {"zeta": 1, "alpha": 1, "mid": 1}, base_path=Path())
        assert [str(c.path) for c in analysis.changes] == ["alpha", "mid", "zeta"]

    def test_determinism(self):
        """Test two runs on the same input give identical changes."""
        before = {"z": [1, {"k": "v"}], "a": {"n": 1}, "tags": {"b": "1", "a": "2"}}
        after = {"z": [2, {"k": "w"}, 3], "a": {"n": 2, "m": 1}, "tags": {"a": "3"}}
        unknown = {"a": {"m": True}}
        first = compare_values(before, after, unknown)
        second = compare_values(dict(reversed(list(before.items()))), after, unknown)
        assert first.changes == second.changes
        assert first.model_dump() == second.model_dump()


class TestUnknownValues:
    """Test handling of values known only after apply."""

    def test_unknown_attribute_is_update_not_remove(self):
        """Test an unknown value absent from after is never a removal."""
        analysis = compare_values({"arn": None}, {}, {"arn": True})
        assert len(analysis.changes) == 1
        change = analysis.changes[0]
        assert change.path == Path.of("arn")
        assert change.action == PropertyAction.UPDATE
        assert change.after == Value.string(UNKNOWN_PLACEHOLDER)
        assert change.unknown
        assert change.unknown_kind == UnknownKind.AFTER

    def test_unknown_overrides_concrete_after(self):
        """Test the placeholder wins over a concrete after value."""
        analysis = compare_values({"id": "old"}, {"id": "new"}, {"id": True})
        change = analysis.changes[0]
        assert change.before == Value.string("old")
        assert change.after.to_json() == UNKNOWN_PLACEHOLDER

    def test_unknown_removed_from_after_keeps_before(self):
        """Test a value present before and missing after but unknown is an update."""
        analysis = compare_values({"ip": "10.0.0.1"}, {}, {"ip": True})
        assert [c.action for c in analysis.changes] == [PropertyAction.UPDATE]

    def test_unknown_both(self):
        """Test a value already unknown before is marked as unknown on both sides."""
        analysis = compare_values({"id": UNKNOWN_PLACEHOLDER}, {}, {"id": True})
        change = analysis.changes[0]
        assert change.unknown_kind == UnknownKind.BOTH
        assert change.before.to_json() == UNKNOWN_PLACEHOLDER
        assert change.after.to_json() == UNKNOWN_PLACEHOLDER

    def test_unknown_nested_in_new_block(self):
        """Test unknown values inside an added block are reported individually."""
        analysis = compare_values({}, {"net": {"cidr": "10.0.0.0/16"}}, {"net": {"id": True}})
        assert [(str(c.path), c.action) for c in analysis.changes] == [
            ("net.cidr", PropertyAction.ADD),
            ("net.id", PropertyAction.UPDATE),
        ]

    def test_whole_unknown_block(self):
        """Test a true mask on a block covers the block."""
        analysis = compare_values({"cfg": {"a": 1}}, {}, {"cfg": True})
        assert _summary(analysis) == [("cfg", PropertyAction.UPDATE, {"a": 1}, UNKNOWN_PLACEHOLDER)]

    def test_unknown_list_element(self):
        """Test masks for list elements."""
        analysis = compare_values({"ids": ["a"]}, {"ids": ["a", None]}, {"ids": [False, True]})
        assert [(str(c.path), c.action) for c in analysis.changes] == [("ids[1]", PropertyAction.UPDATE)]

    def test_no_unknown_change_for_false_mask(self):
        """Test false masks do not create changes."""
        assert compare_values({"a": 1}, {"a": 1}, {"a": False}).count == 0


class TestSensitiveMasking:
    """Test sensitive values never leave the comparator unmasked."""

    def test_policy_matched_property_masked(self):
        """Test a property matched by the sensitivity function is masked on both sides."""
        comparator = ValueComparator(is_sensitive=lambda path: path == Path.of("user_data"))
        analysis = comparator.compare({"user_data": "foo"}, {"user_data": "bar"})
        change = analysis.changes[0]
        assert change.path == Path.of("user_data")
        assert change.sensitive
        assert change.before == Value.string(SENSITIVE_PLACEHOLDER)
        assert change.after == Value.string(SENSITIVE_PLACEHOLDER)

    def test_plan_sensitivity_masks(self):
        """Test before/after sensitive masks from the plan."""
        comparator = ValueComparator()
        analysis = comparator.compare(
            {"password": "hunter2", "name": "db"},
            {"password": "hunter3", "name": "db2"},
            before_sensitive={"password": True},
            after_sensitive={"password": True},
        )
        by_path = {str(c.path): c for c in analysis.changes}
        assert by_path["password"].sensitive
        assert by_path["password"].before.to_json() == SENSITIVE_PLACEHOLDER
        assert by_path["password"].after.to_json() == SENSITIVE_PLACEHOLDER
        assert not by_path["name"].sensitive
        assert by_path["name"].after.to_json() == "db2"

    def test_sensitive_container_masked_as_whole(self):
        """Test a sensitive mask nested in a changed block masks the block."""
        comparator = ValueComparator()
        analysis = comparator.compare(
            {},
            {"a": 1, "secret": {"k": "v"}},
            after_sensitive={"secret": {"k": True}},
        )
        by_path = {str(c.path): c for c in analysis.changes}
        assert by_path["secret"].sensitive
        assert by_path["secret"].after.to_json() == SENSITIVE_PLACEHOLDER

    def test_raw_values_never_leak(self):
        """Test masked changes never carry the raw fixture values."""
        comparator = ValueComparator(is_sensitive=lambda path: path.name == "token")
        analysis = comparator.compare(
            {"auth": {"token": "s3cr3t-old"}},
            {"auth": {"token": "s3cr3t-new"}},
        )
        for change in analysis.changes:
            assert change.sensitive
            assert "s3cr3t" not in change.before.serialize()
            assert "s3cr3t" not in change.after.serialize()

    def test_unknown_sensitive_shows_unknown_after(self):
        """Test unknown placeholder wins over the sensitive placeholder for after."""
        comparator = ValueComparator()
        analysis = comparator.compare(
            {"pw": "x"}, {}, {"pw": True},
            before_sensitive={"pw": True},
        )
        change = analysis.changes[0]
        assert change.sensitive
        assert change.before.to_json() == SENSITIVE_PLACEHOLDER
        assert change.after.to_json() == UNKNOWN_PLACEHOLDER


class TestLimits:
    """Test truncation and size limits."""

    @pytest.fixture
    def wide_change(self):
        before = {}
        after = {f"key_{i:03d}": i for i in range(150)}
        return before, after

    def test_property_cap(self, wide_change):
        """Test 150 candidates with a cap of 100."""
        before, after = wide_change
        analysis = ValueComparator(PerformanceLimits(max_properties_per_resource=100)).compare(before, after)
        assert len(analysis.changes) == 100
        assert analysis.count == 150
        assert analysis.truncated
        assert str(analysis.changes[-1].path) == "key_099"

    def test_value_size_capped(self):
        """Test each value contributes at most the per-value cap."""
        limits = PerformanceLimits(max_property_value_bytes=10)
        analysis = ValueComparator(limits).compare({"a": "x" * 100}, {"a": "y" * 100})
        assert analysis.changes[0].size_bytes == 20
        assert analysis.total_size_bytes == 20
        assert analysis.changes[0].after.to_json() == "y" * 100

    def test_size_counts_utf8_bytes(self):
        """Test sizes are serialized UTF-8 lengths, null counting zero."""
        analysis = compare_values({}, {"a": "é"})
        # '"é"' is 4 bytes
        assert analysis.changes[0].size_bytes == 4

    def test_memory_limit_stops_capture(self):
        """Test exceeding the total size stops capture for the resource."""
        limits = PerformanceLimits(max_total_bytes=25)
        analysis = ValueComparator(limits).compare(
            {}, {"a": "1234567890", "b": "1234567890", "c": "1234567890"}
        )
        assert [str(c.path) for c in analysis.changes] == ["a", "b"]
        assert analysis.truncated
        assert analysis.total_size_bytes == 24
        assert analysis.total_size_bytes <= limits.max_total_bytes
        assert analysis.count == 3

    def test_sensitive_paths_survive_property_cap(self, wide_change):
        """Test sensitive paths are recorded for changes the cap drops."""
        before, after = wide_change
        after["zz_secret"] = "s"
        comparator = ValueComparator(
            PerformanceLimits(max_properties_per_resource=100),
            is_sensitive=lambda path: str(path) == "zz_secret",
        )
        analysis = comparator.compare(before, after)
        assert len(analysis.changes) == 100
        assert analysis.count == 151
        assert analysis.sensitive_paths == ["zz_secret"]

    def test_limits_are_per_call(self, wide_change):
        """Test a comparator instance carries no state between resources."""
        comparator = ValueComparator(PerformanceLimits(max_properties_per_resource=100))
        comparator.compare(*wide_change)
        analysis = comparator.compare({"a": 1}, {"a": 2})
        assert analysis.count == 1
        assert not analysis.truncated


class TestReplacementTriggers:
    """Test per-property replacement flags."""

    def test_triggers_replacement(self):
        """Test changes at or below a replace path are flagged."""
        comparator = ValueComparator()
        analysis = comparator.compare(
            {"ami": "a", "tags": {"Name": "x"}, "nic": [{"subnet": "s1"}]},
            {"ami": "b", "tags": {"Name": "y"}, "nic": [{"subnet": "s2"}]},
            replace_paths=[Path.of("ami"), Path.of("nic")],
        )
        flags = {str(c.path): c.triggers_replacement for c in analysis.changes}
        assert flags == {"ami": True, "nic[0].subnet": True, "tags.Name": False}

    def test_null_value_contract_defaults(self):
        """Test the NULL sentinel is used for missing sides."""
        analysis = compare_values({}, {"a": 1})
        assert analysis.changes[0].before is NULL
