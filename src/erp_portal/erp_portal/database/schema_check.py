"""Compare the columns the application expects against a live table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence


@dataclass(frozen=True)
class ExpectedColumn:
    name: str
    type: str
    required: bool = False
    description: str = ""


@dataclass
class SchemaReport:
    table: str
    present: list[str] = field(default_factory=list)
    missing_required: list[ExpectedColumn] = field(default_factory=list)
    missing_optional: list[ExpectedColumn] = field(default_factory=list)
    type_mismatches: list[tuple[ExpectedColumn, str]] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing_required

    def lines(self) -> list[str]:
        out = [f"Table `{self.table}`: {len(self.present)} expected column(s) present"]
        for col in self.missing_required:
            out.append(f"  MISSING (required) {col.name} {col.type} - {col.description}")
        for col in self.missing_optional:
            out.append(f"  missing (optional) {col.name} {col.type} - {col.description}")
        for col, actual in self.type_mismatches:
            out.append(f"  type mismatch {col.name}: expected {col.type}, found {actual}")
        for name in self.extra:
            out.append(f"  extra column {name}")
        out.append("Result: OK" if self.ok else "Result: required columns missing")
        return out


# MySQL reports e.g. "varchar(50)", "int unsigned", "tinyint(1)"; compare base types.
_TYPE_FAMILIES = {
    "INT": {"int", "integer", "bigint", "smallint", "mediumint", "tinyint"},
    "VARCHAR": {"varchar", "char"},
    "TEXT": {"text", "mediumtext", "tinytext", "longtext"},
    "LONGTEXT": {"longtext", "mediumtext", "text"},
    "DATE": {"date"},
    "DATETIME": {"datetime", "timestamp"},
    "TIMESTAMP": {"timestamp", "datetime"},
    "DECIMAL": {"decimal", "numeric", "double", "float"},
    "JSON": {"json", "longtext"},
    "BOOLEAN": {"tinyint", "boolean", "bool"},
}


def _base_type(mysql_type: str) -> str:
    return mysql_type.strip().lower().split("(")[0].split(" ")[0]


def type_matches(expected: str, actual: str) -> bool:
    family = _TYPE_FAMILIES.get(expected.upper(), {expected.lower()})
    return _base_type(actual) in family


def compare_columns(table: str, expected: Sequence[ExpectedColumn], actual: Sequence[dict]) -> SchemaReport:
    """`actual` are SHOW COLUMNS rows (keys Field and Type)."""

    actual_types = {str(r["Field"]): str(r.get("Type") or "") for r in actual}
    report = SchemaReport(table=table)

    for col in expected:
        found = actual_types.get(col.name)
        if found is None:
            (report.missing_required if col.required else report.missing_optional).append(col)
            continue
        report.present.append(col.name)
        if not type_matches(col.type, found):
            report.type_mismatches.append((col, found))

    expected_names = {c.name for c in expected}
    report.extra = [name for name in actual_types if name not in expected_names]
    return report


PROJECTS_EXPECTED_COLUMNS: tuple[ExpectedColumn, ...] = (
    ExpectedColumn("id", "INT", True, "Primary key (auto-increment)"),
    ExpectedColumn("project_id", "VARCHAR", True, "Human-readable project identifier"),
    ExpectedColumn("project_code", "VARCHAR", False, "Short project code"),
    ExpectedColumn("name", "VARCHAR", True, "Project name"),
    ExpectedColumn("description", "TEXT", False, "Project description"),
    ExpectedColumn("notes", "TEXT", False, "Additional notes"),
    ExpectedColumn("company_id", "INT", False, "Client company reference"),
    ExpectedColumn("client_name", "VARCHAR", False, "Client name (denormalized)"),
    ExpectedColumn("project_manager", "VARCHAR", False, "Project manager name"),
    ExpectedColumn("assigned_to", "VARCHAR", False, "Primary assignee"),
    ExpectedColumn("start_date", "DATE", False, "Project start date"),
    ExpectedColumn("end_date", "DATE", False, "Project end date"),
    ExpectedColumn("target_date", "DATE", False, "Target completion date"),
    ExpectedColumn("status", "VARCHAR", False, "Project status"),
    ExpectedColumn("type", "VARCHAR", False, "Project type"),
    ExpectedColumn("priority", "VARCHAR", False, "Priority level"),
    ExpectedColumn("progress", "INT", False, "Progress percentage (0-100)"),
    ExpectedColumn("budget", "DECIMAL", False, "Project budget"),
    ExpectedColumn("proposal_id", "INT", False, "Source proposal reference"),
    ExpectedColumn("activities", "JSON", False, "Array of activity objects"),
    ExpectedColumn("disciplines", "JSON", False, "Array of discipline names"),
    ExpectedColumn("assignments", "JSON", False, "Array of assignment objects"),
    ExpectedColumn("created_at", "TIMESTAMP", False, "Creation timestamp"),
    ExpectedColumn("updated_at", "TIMESTAMP", False, "Last update timestamp"),
)
