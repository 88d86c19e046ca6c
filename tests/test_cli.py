"""Tests for the console entry point."""
import json

from rulesdemo.cli import format_result, main
from rulesdemo.rules import RuleResult


class TestCli:
    def test_default_workflow_output(self, capsys):
        assert main(["--date", "2025-06-11"]) == 0
        out = capsys.readouterr().out
        assert "Customer: John Doe" in out
        assert "Discount Category: Gold" in out
        assert "Is Weekend: False" in out
        assert "✓ PASSED - VipCustomerDiscount" in out
        assert "✗ FAILED - WeekendBonus" in out
        assert "   Weekend bonus not applicable" in out

    def test_list_workflows(self, capsys):
        assert main(["--list"]) == 0
        names = capsys.readouterr().out.split()
        assert names == ["DiscountRules", "EligibilityRules", "ValidationRules", "DiscountWorkflow"]

    def test_json_output(self, capsys):
        assert main(["--date", "2025-06-14", "--workflow", "DiscountWorkflow", "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["workflow_name"] == "DiscountWorkflow"
        assert [r["is_success"] for r in payload["results"]] == [True, True, True, True, True]

    def test_unknown_workflow(self, capsys):
        assert main(["--workflow", "Nope"]) == 2

    def test_bad_rules_dir(self, tmp_path):
        assert main(["--rules-dir", str(tmp_path / "missing")]) == 2

    def test_undecodable_rules_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_bytes(b"\xff\xfe[]")
        assert main(["--rules-dir", str(path)]) == 2

    def test_unknown_log_level(self):
        assert main(["--log-level", "BOGUS", "--list"]) == 2

    def test_lowercase_log_level(self, capsys):
        assert main(["--log-level", "warning", "--list"]) == 0

    def test_invalid_current_date_setting(self, monkeypatch):
        monkeypatch.setenv("RULESDEMO_CURRENT_DATE", "11/06/2025")
        assert main(["--list"]) == 2

    def test_unknown_log_level_setting(self, monkeypatch):
        monkeypatch.setenv("RULESDEMO_LOG_LEVEL", "chatty")
        assert main(["--list"]) == 2

    def test_format_result(self):
        passed = RuleResult(rule_name="A", is_success=True, message="ok")
        failed = RuleResult(rule_name="B", is_success=False, message="no")
        assert format_result(passed) == "✓ PASSED - A\n   ok\n"
        assert format_result(failed) == "✗ FAILED - B\n   no\n"
