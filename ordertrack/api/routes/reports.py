"""
Reports API.

Runs named report queries over the caller's visible snapshot.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ordertrack.api.deps import AppContext, get_context, get_current_user
from ordertrack.api.schemas import ReportResponse
from ordertrack.components.filtering import ReportFilter
from ordertrack.components.reports import ReportInput, report_names, run
from ordertrack.components.sorting import SortSpec
from ordertrack.domain.entities import UserRef
from ordertrack.domain.errors import NotFoundError
from ordertrack.services.visibility import scope_for_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[str])
def list_reports() -> list[str]:
    return report_names()


@router.get("/{name}", response_model=ReportResponse)
def get_report(
    name: str,
    year: int | None = Query(None),
    months: list[int] = Query([]),
    units: list[str] = Query([]),
    types: list[str] = Query([]),
    owners: list[str] = Query([]),
    q: str | None = Query(None, description="Free-text search"),
    archived: bool | None = Query(None),
    sort: str | None = Query(None),
    direction: Literal["asc", "desc"] = Query("asc"),
    user: UserRef = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
) -> ReportResponse:
    try:
        report_filter = ReportFilter(
            year=year,
            months=frozenset(months),
            units=frozenset(units),
            types=frozenset(types),
            owners=frozenset(owners),
            search_text=q,
            archived=archived,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    orders, expenses = scope_for_user(user, ctx.orders.list(), ctx.expenses.list())
    inp = ReportInput(
        orders=orders,
        expenses=expenses,
        filter=report_filter,
        sort=SortSpec(sort, direction) if sort else None,
        users=ctx.users.list(),
    )

    try:
        view = run(name, inp, rules=ctx.rules, time_port=ctx.clock)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return ReportResponse.from_view(view)
