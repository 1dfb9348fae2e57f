from typing import Literal

from pydantic import BaseModel, Field

from ordertrack.domain.catalog import DEFAULT_LABELS, Catalog, default_catalog


class CatalogEntry(BaseModel):
    value: str
    label: str | None = None


class CatalogRules(BaseModel):
    units: list[CatalogEntry]
    statuses: list[CatalogEntry]
    order_types: list[CatalogEntry]
    expense_categories: list[CatalogEntry]


class ReportingRules(BaseModel):
    timezone: str = "UTC"
    top_units: int = Field(default=5, ge=1)
    other_label: str = "Other"
    median_decimals: int = Field(default=1, ge=0)
    alerts_limit: int = Field(default=5, ge=0)


class SearchRules(BaseModel):
    orders: list[str] = ["id", "title", "unit"]
    expenses: list[str] = ["id", "item", "supplier", "unit"]
    closed_orders: list[str] = ["id", "title"]
    financial_records: list[str] = ["id", "item", "supplier", "linked_os_id"]


class SortDefault(BaseModel):
    key: str
    direction: Literal["asc", "desc"] = "asc"


class Rules(BaseModel):
    catalog: CatalogRules
    reporting: ReportingRules = Field(default_factory=ReportingRules)
    priority_weights: dict[str, int] = {"high": 3, "medium": 2, "low": 1}
    search: SearchRules = Field(default_factory=SearchRules)
    default_sorts: dict[str, SortDefault] = {}

    def build_catalog(self) -> Catalog:
        labels = dict(DEFAULT_LABELS)
        section = self.catalog
        for entries in (
            section.units,
            section.statuses,
            section.order_types,
            section.expense_categories,
        ):
            for entry in entries:
                if entry.label:
                    labels[entry.value] = entry.label
        return Catalog(
            units=tuple(e.value for e in section.units),
            statuses=tuple(e.value for e in section.statuses),
            order_types=tuple(e.value for e in section.order_types),
            expense_categories=tuple(e.value for e in section.expense_categories),
            labels=labels,
        )


def default_rules() -> Rules:
    """Built-in rules matching the default catalog, reporting in UTC."""
    catalog = default_catalog()

    def entries(values: tuple[str, ...]) -> list[CatalogEntry]:
        return [CatalogEntry(value=v, label=catalog.labels.get(v)) for v in values]

    return Rules(
        catalog=CatalogRules(
            units=entries(catalog.units),
            statuses=entries(catalog.statuses),
            order_types=entries(catalog.order_types),
            expense_categories=entries(catalog.expense_categories),
        ),
        default_sorts={
            "closed_orders": SortDefault(key="date_closed", direction="desc"),
            "financial_records": SortDefault(key="date", direction="desc"),
        },
    )
