# marketplace/services/order_service.py
import secrets
import time
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain import cart as aggregator
from marketplace.domain.cart import CartLine
from marketplace.domain.checkout import CheckoutState
from marketplace.domain.errors import (
    EmptyCartError,
    NotFoundError,
    OrderPersistenceError,
    PaymentVerificationError,
    ValidationError,
)
from marketplace.domain.pricing import compute_totals, money
from marketplace.domain.schemas import PaymentConfirmationIn
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.services.notification_service import NotificationService
from marketplace.services.payment_gateway import PaymentGatewayClient
from marketplace.utils.settings import TAX_RATE
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def generate_order_number() -> str:
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "buyer_id": order.buyer_id,
        "status": order.status,
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "tax_amount": order.tax_amount,
        "total_amount": order.total_amount,
        "shipping_address": order.shipping_address,
        "billing_address": order.billing_address,
        "delivery_method_id": order.delivery_method_id,
        "special_instructions": order.special_instructions,
        "payment_method": order.payment_method,
        "gateway_payment_id": order.gateway_payment_id,
        "items": [
            {
                "product_id": i.product_id,
                "seller_id": i.seller_id,
                "quantity": i.quantity,
                "unit_price": i.unit_price,
                "total_price": i.total_price,
            }
            for i in order.items
        ],
        "created_at": order.created_at,
    }


class OrderService:
    """
    Order domain, kept apart from the cart and checkout services.
    place_order is the only way an order row gets written.
    """

    def __init__(
        self,
        db: Session,
        gateway: PaymentGatewayClient | None = None,
        notification_service: NotificationService | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.users = UserRepo(db)
        self.gateway = gateway or PaymentGatewayClient()
        self.notification_service = notification_service or NotificationService()

    def place_order(
        self,
        buyer_id: str,
        state: CheckoutState,
        confirmation: PaymentConfirmationIn,
    ) -> Dict[str, Any]:
        """
        Use Case: place the order for a finished checkout.

        0. Verify the payment signature - nothing is written for an unverified payment
           (an order already written for this checkout is returned as is)
        1. Recompute totals from the current cart and the chosen delivery method
        2. Generate the order number
        3. Write the order header
        4. Write the line items with the product price frozen as of now
        5. Clear the cart
        3-5 share one transaction.
        """
        if state.buyer_id != buyer_id:
            raise PermissionError("Checkout belongs to another buyer")

        if state.delivery_method is None or state.shipping_address is None:
            raise ValidationError("Checkout is missing address or delivery selection")

        if state.gateway_order_id and confirmation.gateway_order_id != state.gateway_order_id:
            logger.error(
                f"Checkout {state.id}: callback for gateway order {confirmation.gateway_order_id}, "
                f"expected {state.gateway_order_id}"
            )
            raise PaymentVerificationError()

        if not self.gateway.verify_signature(
            confirmation.gateway_order_id,
            confirmation.payment_id,
            confirmation.signature,
        ):
            logger.error(
                f"Checkout {state.id}: payment signature verification failed "
                f"(payment {confirmation.payment_id})"
            )
            raise PaymentVerificationError()

        #a confirmation retried after the commit gets the order it already produced
        existing = self.repo.get_by_checkout_ref(state.id)
        if existing:
            logger.info(f"Checkout {state.id} already placed as order {existing.order_number}")
            return order_to_dict(existing)

        #never trust totals computed at an earlier step, the cart may have changed
        items = self.cart_repo.get_cart_items(buyer_id)
        if not items:
            raise EmptyCartError("Cannot place an order with an empty cart")

        lines = [CartLine(i.product_id, i.product.price, i.quantity) for i in items]
        subtotal = aggregator.subtotal(lines)
        totals = compute_totals(subtotal, state.delivery_method, TAX_RATE)

        order_number = generate_order_number()

        try:
            order = self.repo.add_order(
                OrderModel(
                    order_number=order_number,
                    checkout_ref=state.id,
                    buyer_id=buyer_id,
                    status="paid",
                    subtotal=money(totals.subtotal),
                    shipping_cost=money(totals.shipping_cost),
                    tax_amount=totals.tax_amount,
                    total_amount=money(totals.total),
                    shipping_address=state.shipping_address.model_dump(),
                    billing_address=(
                        state.billing_address.model_dump() if state.billing_address else None
                    ),
                    delivery_method_id=state.delivery_method.id,
                    special_instructions=state.special_instructions or None,
                    payment_method=state.payment_method,
                    gateway_order_id=confirmation.gateway_order_id,
                    gateway_payment_id=confirmation.payment_id,
                    gateway_signature=confirmation.signature,
                )
            )

            self.repo.add_order_items(
                [
                    OrderItemModel(
                        order_id=order.id,
                        product_id=i.product_id,
                        seller_id=i.product.seller_id,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                        total_price=money(line.line_total),
                    )
                    for i, line in zip(items, lines)
                ]
            )

            self.cart_repo.clear(buyer_id, commit=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Checkout {state.id}: order transaction rolled back: {e}")
            raise OrderPersistenceError("Failed to create order") from e

        self.db.refresh(order)
        logger.info(f"Order {order.order_number} placed for checkout {state.id}, total {order.total_amount}")

        self.notification_service.send_order_notification(
            buyer_id, order.order_number, str(order.total_amount)
        )

        return order_to_dict(order)

    def get_order(self, order_id: str, user_id: str) -> Dict[str, Any]:
        """
        Use Case: read one order (Query).
        Buyers see their own, sellers orders with their products, admins all.
        """
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError("Order not found")

        user = self.users.get_user(user_id)
        role = user.role if user else None

        allowed = (
            order.buyer_id == user_id
            or role == "admin"
            or (role == "seller" and any(i.seller_id == user_id for i in order.items))
        )
        if not allowed:
            raise PermissionError("No access to this order")

        return order_to_dict(order)

    def list_orders(self, user_id: str) -> list[Dict[str, Any]]:
        user = self.users.get_user(user_id)
        if not user:
            raise PermissionError("Unknown user")

        if user.role == "admin":
            orders = self.repo.list_all()
        elif user.role == "seller":
            orders = self.repo.list_for_seller(user_id)
        else:
            orders = self.repo.list_for_buyer(user_id)

        return [order_to_dict(o) for o in orders]
