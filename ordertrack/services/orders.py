import logging
from typing import Any

from ordertrack.components.linkage import find_order
from ordertrack.domain.entities import OrderStatus, ServiceOrder
from ordertrack.domain.errors import OrderTrackError
from ordertrack.domain.state import append_log, archive, delegate, edit, transition
from ordertrack.ports.clock import ClockPort
from ordertrack.ports.sources import OrderSourcePort, UserDirectoryPort

logger = logging.getLogger(__name__)


class OrderService:
    """
    Applies state machine operations to orders held by a source.

    Each operation fetches a fresh snapshot, computes the new order and
    writes it back. Failures leave the source untouched.
    """

    def __init__(
        self,
        orders: OrderSourcePort,
        clock: ClockPort,
        users: UserDirectoryPort | None = None,
    ):
        self.orders = orders
        self.clock = clock
        self.users = users

    def list_orders(self, archived: bool | None = None) -> list[ServiceOrder]:
        return self.orders.list(archived=archived)

    def get(self, order_id: str) -> ServiceOrder:
        return find_order(order_id, self.orders.list())

    def create_order(self, fields: dict[str, Any]) -> ServiceOrder:
        order = self.orders.create(fields)
        logger.info("Order %s created for unit %s", order.id, order.unit)
        return order

    def move(
        self,
        order_id: str,
        new_status: OrderStatus | str,
        actor_id: str | None = None,
    ) -> ServiceOrder:
        order = self.get(order_id)
        try:
            updated = transition(order, new_status, self.clock.now_utc(), actor_id)
        except OrderTrackError as e:
            logger.warning("Rejected status change on %s: %s", order_id, e)
            raise
        if updated.status == order.status:
            return order

        saved = self.orders.update(
            order_id,
            {
                "status": updated.status,
                "date_closed": updated.date_closed,
                "history": updated.history,
            },
        )
        logger.info("Order %s moved %s -> %s", order_id, order.status.value, saved.status.value)
        return saved

    def archive(self, order_id: str, actor_id: str | None = None) -> ServiceOrder:
        order = self.get(order_id)
        try:
            updated = archive(order, self.clock.now_utc(), actor_id)
        except OrderTrackError as e:
            logger.warning("Rejected archival of %s: %s", order_id, e)
            raise

        self.orders.archive(order_id, history=updated.history)
        logger.info("Order %s archived", order_id)
        return self.get(order_id)

    def add_log(self, order_id: str, message: str, user_id: str | None = None) -> ServiceOrder:
        order = self.get(order_id)
        try:
            updated = append_log(order, message, self.clock.now_utc(), user_id)
        except OrderTrackError as e:
            logger.warning("Rejected history entry on %s: %s", order_id, e)
            raise
        return self.orders.update(order_id, {"history": updated.history})

    def delegate(
        self,
        order_id: str,
        new_owner_id: str,
        actor_id: str | None = None,
    ) -> ServiceOrder:
        order = self.get(order_id)
        names = {u.id: u.name for u in self.users.list()} if self.users else {}
        try:
            updated = delegate(
                order,
                new_owner_id,
                self.clock.now_utc(),
                actor_id,
                owner_name=names.get(new_owner_id),
            )
        except OrderTrackError as e:
            logger.warning("Rejected delegation of %s: %s", order_id, e)
            raise
        if updated.owner_id == order.owner_id:
            return order

        saved = self.orders.update(
            order_id, {"owner_id": updated.owner_id, "history": updated.history}
        )
        logger.info("Order %s delegated to %s", order_id, new_owner_id)
        return saved

    def edit(self, order_id: str, **fields: Any) -> ServiceOrder:
        order = self.get(order_id)
        try:
            updated = edit(order, **fields)
        except OrderTrackError as e:
            logger.warning("Rejected edit of %s: %s", order_id, e)
            raise
        return self.orders.update(order_id, {k: getattr(updated, k) for k in fields})
