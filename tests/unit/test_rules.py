from pathlib import Path

import pytest

from ordertrack.rules.loader import load_rules
from ordertrack.rules.models import Rules, default_rules

VALID_CATALOG = """
catalog:
  units: [{value: North}, {value: South, label: "Sul"}]
  statuses: [{value: open}, {value: done}]
  order_types: [{value: corrective}]
  expense_categories: [{value: parts}]
"""


def _write(tmp_path: Path, content: str, name: str = "rules.yaml") -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadRules:
    def test_project_rules_file(self, rules: Rules) -> None:
        assert rules.reporting.timezone == "America/Fortaleza"
        assert rules.reporting.other_label == "Outros"
        catalog = rules.build_catalog()
        assert catalog.statuses[0] == "done"
        assert catalog.label("waiting") == "Análise"
        assert "Poke (Santos Dumont)" in catalog.units
        assert rules.default_sorts["closed_orders"].direction == "desc"

    def test_minimal_file_uses_defaults(self, tmp_path: Path) -> None:
        rules = load_rules(_write(tmp_path, VALID_CATALOG))
        assert rules.reporting.top_units == 5
        assert rules.priority_weights == {"high": 3, "medium": 2, "low": 1}
        assert rules.search.closed_orders == ["id", "title"]
        assert rules.build_catalog().units == ("North", "South")
        assert rules.build_catalog().label("South") == "Sul"

    def test_markdown_fenced_yaml(self, tmp_path: Path) -> None:
        content = f"# Rules\n\nSome prose.\n\n```yaml{VALID_CATALOG}```\n\nTrailing notes.\n"
        rules = load_rules(_write(tmp_path, content, "rules.md"))
        assert rules.build_catalog().statuses == ("open", "done")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(_write(tmp_path, "catalog: [unclosed"))

    def test_schema_violation(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="validation failed"):
            load_rules(_write(tmp_path, "catalog:\n  units: []\n"))

    def test_negative_top_units(self, tmp_path: Path) -> None:
        content = VALID_CATALOG + "reporting:\n  top_units: 0\n"
        with pytest.raises(ValueError):
            load_rules(_write(tmp_path, content))

    def test_unknown_timezone(self, tmp_path: Path) -> None:
        content = VALID_CATALOG + "reporting:\n  timezone: Mars/Olympus_Mons\n"
        with pytest.raises(ValueError, match="timezone"):
            load_rules(_write(tmp_path, content))


class TestDefaultRules:
    def test_reports_in_utc(self) -> None:
        assert default_rules().reporting.timezone == "UTC"

    def test_catalog_matches_enums(self) -> None:
        catalog = default_rules().build_catalog()
        assert catalog.order_types == ("preventive", "corrective", "installation", "other")
        assert catalog.label("in_progress") == "In Progress"

    def test_default_sorts(self) -> None:
        sorts = default_rules().default_sorts
        assert (sorts["financial_records"].key, sorts["financial_records"].direction) == (
            "date",
            "desc",
        )
