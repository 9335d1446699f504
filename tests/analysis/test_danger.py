"""Tests for the danger evaluator."""

import pytest
from plandiff.analysis.danger import evaluate_danger
from plandiff.config.models import DangerPolicy, SensitiveProperty, SensitiveResource
from plandiff.contracts.property_changes import PropertyAction, PropertyChange, PropertyChangeAnalysis
from plandiff.contracts.resource_analysis import RiskLevel
from plandiff.diff.comparator import ValueComparator
from plandiff.diff.paths import Path
from plandiff.ingest.models import ResourceAction


@pytest.fixture
def policy():
    return DangerPolicy(
        sensitive_resources=[SensitiveResource(resource_type="aws_db_instance")],
        sensitive_properties=[
            SensitiveProperty(resource_type="aws_instance", property="user_data"),
            SensitiveProperty(resource_type="aws_db_instance", property="password"),
        ],
    )


def _changes(*sensitive_paths):
    return PropertyChangeAnalysis(
        changes=[
            PropertyChange(path=Path.parse(p), name=Path.parse(p).name, action=PropertyAction.UPDATE, sensitive=True)
            for p in sensitive_paths
        ],
        sensitive_paths=list(sensitive_paths),
        count=len(sensitive_paths),
    )


class TestEvaluateDanger:
    """Test danger flags, reasons and risk levels."""

    def test_sensitive_resource_replace_is_critical(self, policy):
        """Test replacing a sensitive resource type."""
        result = evaluate_danger("aws_db_instance", ResourceAction.REPLACE, _changes(), policy)
        assert result.is_dangerous
        assert result.risk_level == RiskLevel.CRITICAL
        assert result.reason == "Database replacement"

    def test_sensitive_resource_delete_is_high(self, policy):
        """Test deleting a sensitive resource type."""
        result = evaluate_danger("aws_db_instance", ResourceAction.DELETE, _changes(), policy)
        assert result.is_dangerous
        assert result.risk_level == RiskLevel.HIGH
        assert result.reason == "Sensitive resource deletion"

    def test_plain_delete_is_high_not_dangerous(self, policy):
        """Test every deletion is high risk even when not dangerous."""
        result = evaluate_danger("aws_s3_object", ResourceAction.DELETE, _changes(), policy)
        assert not result.is_dangerous
        assert result.risk_level == RiskLevel.HIGH
        assert result.reason == ""

    def test_plain_replace_is_medium(self, policy):
        """Test a non-sensitive replacement."""
        result = evaluate_danger("aws_instance", ResourceAction.REPLACE, _changes(), policy)
        assert not result.is_dangerous
        assert result.risk_level == RiskLevel.MEDIUM

    def test_sensitive_property_update_is_high(self, policy):
        """Test an update touching a sensitive property."""
        result = evaluate_danger("aws_instance", ResourceAction.UPDATE, _changes("user_data"), policy)
        assert result.is_dangerous
        assert result.risk_level == RiskLevel.HIGH
        assert result.reason == "Sensitive property change: user_data"
        assert result.properties == ["user_data"]

    def test_sensitive_property_on_replace_of_plain_type_is_high(self, policy):
        """Test a replacement dangerous only because of a property."""
        result = evaluate_danger("aws_instance", ResourceAction.REPLACE, _changes("user_data"), policy)
        assert result.is_dangerous
        assert result.risk_level == RiskLevel.HIGH

    def test_sensitive_property_on_create_is_not_dangerous(self, policy):
        """Test creations never trigger on properties."""
        result = evaluate_danger("aws_instance", ResourceAction.CREATE, _changes("user_data"), policy)
        assert not result.is_dangerous
        assert result.risk_level == RiskLevel.LOW

    def test_combined_triggers(self, policy):
        """Test resource trigger comes first when both fire."""
        result = evaluate_danger("aws_db_instance", ResourceAction.REPLACE, _changes("password", "tags.Secret"), policy)
        assert result.is_dangerous
        assert result.risk_level == RiskLevel.CRITICAL
        assert result.reason == "Database replacement and Sensitive property changes: password, tags.Secret"

    def test_plain_update_is_low(self, policy):
        """Test an ordinary update."""
        result = evaluate_danger("aws_instance", ResourceAction.UPDATE, PropertyChangeAnalysis(), policy)
        assert not result.is_dangerous
        assert result.risk_level == RiskLevel.LOW

    def test_no_op_is_low(self, policy):
        """Test no-op resources."""
        result = evaluate_danger("aws_db_instance", ResourceAction.NO_OP, PropertyChangeAnalysis(), policy)
        assert not result.is_dangerous
        assert result.risk_level == RiskLevel.LOW

    def test_risk_levels_are_ordered(self):
        """Test the risk level ranking."""
        ranked = sorted([RiskLevel.HIGH, RiskLevel.LOW, RiskLevel.CRITICAL, RiskLevel.MEDIUM], key=lambda r: r.rank)
        assert ranked == [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]


class TestPolicyMatching:
    """Test configured sensitive property matching through the comparator."""

    def test_user_data_masked_and_dangerous(self, policy):
        """Test a configured property is masked and makes the update dangerous."""
        comparator = ValueComparator(is_sensitive=lambda path: policy.matches_property("aws_instance", path))
        changes = comparator.compare({"user_data": "foo"}, {"user_data": "bar"})
        assert changes.changes[0].sensitive
        result = evaluate_danger("aws_instance", ResourceAction.UPDATE, changes, policy)
        assert result.is_dangerous

    def test_rule_for_other_type_is_ignored(self, policy):
        """Test rules are scoped to their resource type."""
        assert not policy.matches_property("aws_launch_template", Path.of("user_data"))

    def test_unmatched_rule_is_silent(self, policy):
        """Test a rule that matches nothing is not an error."""
        comparator = ValueComparator(is_sensitive=lambda path: policy.matches_property("aws_db_instance", path))
        changes = comparator.compare({"name": "a"}, {"name": "b"})
        assert not changes.changes[0].sensitive

    def test_nested_rule(self):
        """Test indexed rules address list elements only."""
        nested = DangerPolicy(sensitive_properties=[
            SensitiveProperty(resource_type="aws_instance", property="ebs_block_device[0].kms_key_id"),
        ])
        assert nested.matches_property("aws_instance", Path.of("ebs_block_device", 0, "kms_key_id"))
        assert nested.matches_property("aws_instance", Path.of("ebs_block_device"))
        assert not nested.matches_property("aws_instance", Path.of("ebs_block_device", 1, "kms_key_id"))
        assert not nested.matches_property("aws_instance", Path.of("ebs_block_device", "0", "kms_key_id"))
