from ordertrack.services.orders import OrderService
from ordertrack.services.visibility import scope_for_user, visible_orders

__all__ = ["OrderService", "scope_for_user", "visible_orders"]
