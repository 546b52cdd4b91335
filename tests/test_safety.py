"""Unit tests for the safety and confirmation system."""

from unittest.mock import patch

from src.core.safety import ConfirmationRequest, SafetyManager


def _request():
    return ConfirmationRequest(
        operation="Apply Terraform plan for dev",
        description="Creates resources",
        impact_level="HIGH",
        configuration_summary={"environment": "dev", "tags": ["a", "b"]},
        warnings=["May incur costs"],
    )


class TestSafetyManager:
    """Test cases for SafetyManager."""

    @patch("builtins.input", return_value="y")
    def test_confirm_yes(self, mock_input):
        safety = SafetyManager()

        assert safety.confirm("Add AWS secrets now?") is True
        mock_input.assert_called_once_with("Add AWS secrets now? (y/N): ")

    @patch("builtins.input", return_value="")
    def test_confirm_default_no(self, _mock_input):
        assert SafetyManager().confirm("Continue?") is False

    @patch("builtins.input", return_value="")
    def test_confirm_default_yes(self, mock_input):
        assert SafetyManager().confirm("Continue?", default=True) is True
        mock_input.assert_called_once_with("Continue? (Y/n): ")

    @patch("builtins.input", return_value="nope")
    def test_confirm_other_answer_declines(self, _mock_input):
        assert SafetyManager().confirm("Continue?") is False

    @patch("builtins.input")
    def test_non_interactive_auto_confirms(self, mock_input):
        safety = SafetyManager(enable_confirmations=False)

        assert safety.confirm("Continue?") is True
        assert safety.request_confirmation(_request()) is True
        safety.pause()
        mock_input.assert_not_called()

        audit_log = safety.get_audit_log()
        assert len(audit_log) == 2
        assert all(entry["confirmed"] for entry in audit_log)

    @patch("builtins.input", return_value="yes")
    def test_request_confirmation_accepted(self, _mock_input, capsys):
        safety = SafetyManager()

        assert safety.request_confirmation(_request()) is True

        output = capsys.readouterr().out
        assert "Operation: Apply Terraform plan for dev" in output
        assert "May incur costs" in output
        assert "tags: a, b" in output

    @patch("builtins.input", return_value="n")
    def test_request_confirmation_declined_is_logged(self, _mock_input):
        safety = SafetyManager()

        assert safety.request_confirmation(_request()) is False

        entry = safety.get_audit_log()[0]
        assert entry["confirmed"] is False
        assert entry["reason"] == "User declined"
        assert entry["description"] == "Creates resources"
        assert entry["configuration"]["environment"] == "dev"

    def test_audit_log_is_a_copy(self):
        safety = SafetyManager(enable_confirmations=False)
        safety.confirm("Continue?")

        safety.get_audit_log().clear()

        assert len(safety.get_audit_log()) == 1

    def test_create_apply_confirmation(self):
        request = SafetyManager().create_apply_confirmation("prd", {"environment": "prd"})

        assert request.impact_level == "HIGH"
        assert "prd" in request.operation
        assert request.configuration_summary == {"environment": "prd"}
        assert any("incur costs" in warning for warning in request.warnings)
