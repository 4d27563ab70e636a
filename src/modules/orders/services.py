"""Order lifecycle service (Use Cases).

Takes a priced cart and a confirmed payment to a pending order with a
reserved courier and a delivery code, and later consumes that code to close
the order and hand the courier back to the pool.

Rules enforced here:
- Totals are always computed from catalog prices, never from the client.
- No order row exists unless a courier was reserved for it.
- A courier reserved for an order that could not be stored is released.
- A courier is busy from reservation until delivery or cancellation.
- Status only moves forward; ``delivered`` and ``cancelled`` are final.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from modules.notifications.exceptions import NotificationFailure
from modules.orders.codes import generate_verification_code
from modules.orders.constants import VERIFICATION_CODE_SUBJECT, OrderStatus
from modules.orders.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    InvalidCode,
    InvalidOrderStatus,
    ItemNotFound,
    NoCourierAvailable,
    OrderNotFound,
    PaymentNotConfirmed,
    PersistenceFailure,
    VerificationLocked,
)

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import ICatalogRepository
    from modules.couriers.repositories.interfaces import ICourierPool
    from modules.notifications.senders import INotificationSender
    from modules.orders.dtos import PlaceOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for the order lifecycle.

    Collaborators are injected through the constructor.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        catalog_repository: ICatalogRepository,
        courier_pool: ICourierPool,
        notification_sender: INotificationSender,
    ) -> None:
        self._order_repo = order_repository
        self._catalog_repo = catalog_repository
        self._courier_pool = courier_pool
        self._notifier = notification_sender

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def place_order(self, dto: PlaceOrderDTO) -> Order:
        """Place an order and assign it a courier.

        Steps:
        1. Check the payment carries the confirmed status.
        2. Price every item from the catalog.
        3. Reserve one courier from the pool.
        4. Persist order + items + history with a fresh delivery code.
           On failure the courier goes back to the pool.
        5. Send the code to the customer. Failures are logged only.

        Raises:
            PaymentNotConfirmed: payment status is not the confirmed one.
            ItemNotFound: a food cannot be priced.
            NoCourierAvailable: every courier is busy.
            PersistenceFailure: the order could not be stored.
        """
        log = logger.bind(user_id=str(dto.user_id))
        log.info("order.placement_started", item_count=len(dto.items))

        # 1. Payment gate
        if dto.payment.status != settings.ORDER_PAYMENT_CONFIRMED_STATUS:
            log.warning("order.payment_not_confirmed", payment_status=dto.payment.status)
            raise PaymentNotConfirmed(
                f"Payment {dto.payment.id} is not confirmed "
                f"(status: {dto.payment.status})."
            )

        # 2. Pricing
        repo_items = []
        for item_dto in dto.items:
            unit_price = self._catalog_repo.get_price(str(item_dto.food_id))
            if unit_price is None:
                log.warning("order.item_not_found", food_id=str(item_dto.food_id))
                raise ItemNotFound(f"Food {item_dto.food_id} not found.")
            repo_items.append(
                {
                    "food_id": item_dto.food_id,
                    "quantity": item_dto.quantity,
                    "unit_price": unit_price,
                }
            )

        # 3. Courier reservation
        courier_id = self._courier_pool.reserve_any()
        if courier_id is None:
            log.warning("order.no_courier_available")
            raise NoCourierAvailable("No courier is available right now.")
        log = log.bind(courier_id=str(courier_id))

        # 4. Persistence, compensated by releasing the courier
        try:
            order = self._persist_order(dto, repo_items, courier_id)
        except Exception as exc:
            # Whatever failed, the reserved courier goes back to the pool
            self._courier_pool.release(courier_id)
            log.error(
                "order.persistence_failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise PersistenceFailure(
                "The order could not be stored. Please try again."
            ) from exc

        log.info(
            "order.placed",
            order_id=str(order.id),
            total_price=str(order.total_price),
        )

        # 5. Code dispatch
        self._dispatch_code(order, dto.contact_email)

        return self._order_repo.get_by_id(str(order.id)) or order

    def verify_delivery(self, order_id: UUID, code: str) -> Order:
        """Close an order with the code the customer gave the courier.

        A wrong code leaves the status untouched and counts one attempt;
        once ``ORDER_VERIFICATION_MAX_ATTEMPTS`` is reached further codes
        are refused. The counter is never reset: a locked order keeps its
        courier until staff force it to ``delivered`` or it is cancelled.
        Repeating the correct code on a delivered order is a no-op.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: the order was cancelled.
            VerificationLocked: too many wrong codes were submitted.
            InvalidCode: the code does not match.
        """
        with transaction.atomic():
            order = self._order_repo.get_for_update(str(order_id))
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")

            log = logger.bind(order_id=str(order_id), current_status=order.status)

            if order.status == OrderStatus.CANCELLED:
                log.warning("order.verify_cancelled")
                raise InvalidOrderStatus(f"Order {order_id} was cancelled.")

            if order.status == OrderStatus.DELIVERED:
                if code != order.verification_code:
                    log.warning("order.verification_failed")
                    raise InvalidCode(f"Invalid delivery code for order {order_id}.")
                log.info("order.delivery_reconfirmed")
                return order

            max_attempts = settings.ORDER_VERIFICATION_MAX_ATTEMPTS
            if max_attempts and order.verification_attempts >= max_attempts:
                log.warning(
                    "order.verification_locked_courier_held",
                    attempts=order.verification_attempts,
                    courier_id=str(order.courier_id) if order.courier_id else None,
                )
                raise VerificationLocked(
                    f"Too many invalid codes for order {order_id}."
                )

            matched = code == order.verification_code
            if matched:
                self._mark_delivered(order)
            else:
                attempts = self._order_repo.register_failed_verification(order.id)

        if not matched:
            # Raised outside the transaction so the attempt counter commits
            log.warning("order.verification_failed", attempts=attempts)
            raise InvalidCode(f"Invalid delivery code for order {order_id}.")

        log.info("order.delivered")
        return self._order_repo.get_by_id(str(order_id)) or order

    def override_status(
        self,
        order_id: UUID,
        new_status: str,
        notes: str = "",
    ) -> Order:
        """Administrative status change.

        Skips code verification but keeps the transition table: no
        regressions, nothing out of a terminal state. Forcing ``delivered``
        releases the courier exactly like a verified delivery; ``cancelled``
        goes through ``cancel_order``.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: transition is not allowed.
        """
        if new_status == OrderStatus.CANCELLED:
            return self.cancel_order(order_id, notes=notes)

        with transaction.atomic():
            order = self._order_repo.get_for_update(str(order_id))
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")

            log = logger.bind(
                order_id=str(order_id),
                current_status=order.status,
                new_status=new_status,
            )

            if not order.can_transition_to(new_status):
                log.warning("order.invalid_transition")
                raise InvalidOrderStatus(
                    f"Cannot transition from {order.status} to {new_status}."
                )

            releases_courier = (
                new_status == OrderStatus.DELIVERED and order.holds_courier
            )
            old_status = order.status
            order.status = new_status
            if new_status == OrderStatus.DELIVERED:
                order.delivered_at = timezone.now()
            order.add_domain_event(
                OrderStatusChanged(
                    aggregate_id=order.id,
                    old_status=old_status,
                    new_status=new_status,
                )
            )
            self._order_repo.save(order)
            self._order_repo.add_history(
                order_id=order.id,
                status=new_status,
                notes=notes or "Status changed by administrator",
                old_status=old_status,
            )
            if releases_courier:
                self._courier_pool.release(order.courier_id)

        log.info("order.status_overridden")
        return self._order_repo.get_by_id(str(order_id)) or order

    def cancel_order(self, order_id: UUID, notes: str = "") -> Order:
        """Cancel an undelivered order and return its courier to the pool.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: the order is already delivered or cancelled.
        """
        with transaction.atomic():
            order = self._order_repo.get_for_update(str(order_id))
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")

            log = logger.bind(order_id=str(order_id), current_status=order.status)

            if not order.can_transition_to(OrderStatus.CANCELLED):
                log.warning("order.cancel_not_allowed")
                raise InvalidOrderStatus(
                    f"Cannot cancel order in status {order.status}."
                )

            releases_courier = order.holds_courier
            old_status = order.status
            order.status = OrderStatus.CANCELLED
            order.add_domain_event(OrderCancelled(aggregate_id=order.id))
            self._order_repo.save(order)
            self._order_repo.add_history(
                order_id=order.id,
                status=OrderStatus.CANCELLED,
                notes=notes or "Order cancelled",
                old_status=old_status,
            )
            if releases_courier:
                self._courier_pool.release(order.courier_id)

        log.info("order.cancelled")
        return self._order_repo.get_by_id(str(order_id)) or order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        return self._order_repo.list(filters)

    def list_courier_orders(self, courier_id: UUID) -> List[Order]:
        """Orders ever assigned to a courier, newest first."""
        return self._order_repo.list({"courier_id": courier_id})

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @transaction.atomic
    def _persist_order(
        self,
        dto: PlaceOrderDTO,
        repo_items: List[Dict[str, Any]],
        courier_id: UUID,
    ) -> Order:
        location = dto.location
        order = self._order_repo.create(
            {
                "user_id": dto.user_id,
                "items": repo_items,
                "delivery_name": dto.delivery_info.name,
                "delivery_phone": dto.delivery_info.phone,
                "delivery_address": dto.delivery_info.address,
                "payment_id": dto.payment.id,
                "payment_status": dto.payment.status,
                "latitude": location.lat if location else None,
                "longitude": location.lng if location else None,
                "status": OrderStatus.PENDING,
                "verification_code": generate_verification_code(),
                "courier_id": courier_id,
            }
        )
        order.add_domain_event(OrderPlaced(aggregate_id=order.id, courier_id=courier_id))
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=OrderStatus.PENDING,
            notes="Order placed",
        )
        return order

    def _mark_delivered(self, order: Order) -> None:
        releases_courier = order.holds_courier
        old_status = order.status
        order.status = OrderStatus.DELIVERED
        order.delivered_at = timezone.now()
        order.add_domain_event(
            OrderDelivered(aggregate_id=order.id, courier_id=order.courier_id)
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=OrderStatus.DELIVERED,
            notes="Delivery code verified",
            old_status=old_status,
        )
        if releases_courier:
            self._courier_pool.release(order.courier_id)
        else:
            logger.info("order.no_courier_to_release", order_id=str(order.id))

    def _dispatch_code(self, order: Order, destination: Optional[str]) -> None:
        log = logger.bind(order_id=str(order.id))
        if not destination:
            log.warning("order.notification_skipped", reason="no_destination")
            return
        try:
            self._notifier.send(
                destination, VERIFICATION_CODE_SUBJECT, order.verification_code
            )
        except NotificationFailure as exc:
            log.warning("order.notification_failed", error=str(exc))
            return
        log.info("order.code_dispatched")
