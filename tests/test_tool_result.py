"""Tests for the ToolResult envelope."""

import pytest

from billing_bridge.tools.base import ToolResult


class TestToolResult:
    """Tests for ToolResult construction and serialization."""

    def test_failure_to_dict(self):
        """Failed results carry only success and error."""
        result = ToolResult.failure("Query rejected")

        assert result.to_dict() == {"success": False, "error": "Query rejected"}

    def test_records_to_dict(self):
        """List results use camelCase totalSize."""
        result = ToolResult.of_records([{"id": "a"}], 7)

        assert result.to_dict() == {
            "success": True,
            "totalSize": 7,
            "records": [{"id": "a"}],
        }

    def test_empty_records_still_a_payload(self):
        """An empty list is a payload, not an absent field."""
        data = ToolResult.of_records([], 0).to_dict()

        assert data["records"] == []
        assert data["totalSize"] == 0
        assert "error" not in data

    def test_summary_to_dict(self):
        """Aggregate results carry a summary and nothing else."""
        result = ToolResult.of_summary({"totalInvoiced": 0})

        assert result.to_dict() == {"success": True, "summary": {"totalInvoiced": 0}}

    def test_success_with_error_rejected(self):
        """success=True and an error cannot coexist."""
        with pytest.raises(ValueError):
            ToolResult(success=True, error="boom")

    def test_failure_without_error_rejected(self):
        """A failed result must say why."""
        with pytest.raises(ValueError):
            ToolResult(success=False)

    def test_failure_with_payload_rejected(self):
        """A failed result cannot carry records."""
        with pytest.raises(ValueError):
            ToolResult(success=False, error="boom", records=[])
