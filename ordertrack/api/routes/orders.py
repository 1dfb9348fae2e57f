"""
Orders API.

Lifecycle actions on service orders: create, edit, move between
statuses, append history, delegate and archive.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ordertrack.adapters.time_local import LocalTimeAdapter
from ordertrack.api.deps import get_current_user, get_local_time, get_order_service
from ordertrack.api.schemas import (
    CreateOrderRequest,
    DelegateRequest,
    EditOrderRequest,
    LogRequest,
    TransitionRequest,
)
from ordertrack.domain.entities import ServiceOrder, UserRef
from ordertrack.domain.errors import (
    InvalidTransitionError,
    NotArchivableError,
    NotFoundError,
)
from ordertrack.services.orders import OrderService
from ordertrack.services.visibility import visible_orders

logger = logging.getLogger(__name__)

router = APIRouter()


def _call(action: Callable[[], ServiceOrder]) -> ServiceOrder:
    """Map domain errors onto HTTP status codes."""
    try:
        return action()
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except (InvalidTransitionError, NotArchivableError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


FORM_DATE_FIELDS = ("date_opened", "date_forecast")


def _pin_form_dates(fields: dict[str, Any], local_time: LocalTimeAdapter) -> dict[str, Any]:
    """Calendar days from forms are stored as local noon in UTC."""
    for name in FORM_DATE_FIELDS:
        value = fields.get(name)
        if isinstance(value, date) and not isinstance(value, datetime):
            fields[name] = local_time.parse_form_date(value)
    return fields


def _visible_order(service: OrderService, user: UserRef, order_id: str) -> ServiceOrder:
    """Orders outside the caller's scope are reported as missing."""
    order = _call(lambda: service.get(order_id))
    if not visible_orders(user, [order]):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"ServiceOrder not found: {order_id}",
        )
    return order


@router.get("", response_model=list[ServiceOrder])
def list_orders(
    archived: bool | None = Query(None),
    user: UserRef = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> list[ServiceOrder]:
    return visible_orders(user, service.list_orders(archived=archived))


@router.get("/{order_id}", response_model=ServiceOrder)
def get_order(
    order_id: str,
    user: UserRef = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ServiceOrder:
    return _visible_order(service, user, order_id)


@router.post("", response_model=ServiceOrder, status_code=status.HTTP_201_CREATED)
def create_order(
    body: CreateOrderRequest,
    user: UserRef = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
    local_time: LocalTimeAdapter = Depends(get_local_time),
) -> ServiceOrder:
    fields = _pin_form_dates(body.model_dump(exclude_none=True), local_time)
    fields.setdefault("owner_id", user.id)
    return _call(lambda: service.create_order(fields))


@router.patch("/{order_id}", response_model=ServiceOrder)
def edit_order(
    order_id: str,
    body: EditOrderRequest,
    user: UserRef = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
    local_time: LocalTimeAdapter = Depends(get_local_time),
) -> ServiceOrder:
    _visible_order(service, user, order_id)
    fields = _pin_form_dates(body.model_dump(exclude_none=True), local_time)
    return _call(lambda: service.edit(order_id, **fields))


@router.post("/{order_id}/transition", response_model=ServiceOrder)
def transition_order(
    order_id: str,
    body: TransitionRequest,
    user: UserRef = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ServiceOrder:
    _visible_order(service, user, order_id)
    return _call(lambda: service.move(order_id, body.status, actor_id=user.id))


@router.post("/{order_id}/archive", response_model=ServiceOrder)
def archive_order(
    order_id: str,
    user: UserRef = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ServiceOrder:
    _visible_order(service, user, order_id)
    return _call(lambda: service.archive(order_id, actor_id=user.id))


@router.post("/{order_id}/logs", response_model=ServiceOrder)
def add_log(
    order_id: str,
    body: LogRequest,
    user: UserRef = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ServiceOrder:
    _visible_order(service, user, order_id)
    return _call(lambda: service.add_log(order_id, body.message, user_id=user.id))


@router.post("/{order_id}/delegate", response_model=ServiceOrder)
def delegate_order(
    order_id: str,
    body: DelegateRequest,
    user: UserRef = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ServiceOrder:
    _visible_order(service, user, order_id)
    return _call(lambda: service.delegate(order_id, body.owner_id, actor_id=user.id))
