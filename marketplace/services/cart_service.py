# marketplace/services/cart_service.py
from typing import Dict, Any
from sqlalchemy.orm import Session

from marketplace.data.models.cart_item import CartItemModel
from marketplace.domain import cart as aggregator
from marketplace.domain.cart import CartLine
from marketplace.domain.errors import NotFoundError, ValidationError
from marketplace.domain.pricing import money
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Cart use cases for one buyer.
    commands (add, set quantity, remove, clear) change the cart
    query (get, lines) only read
    Line prices are always the product's current price.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query
    def lines(self, buyer_id: str) -> list[CartLine]:
        return [
            CartLine(
                product_id=i.product_id,
                unit_price=i.product.price,
                quantity=i.quantity,
            )
            for i in self.repo.get_cart_items(buyer_id)
        ]

    def get_cart(self, buyer_id: str) -> Dict[str, Any]:
        items = self.repo.get_cart_items(buyer_id)
        lines = [CartLine(i.product_id, i.product.price, i.quantity) for i in items]

        #dict turned into json by the router
        return {
            "buyer_id": buyer_id,
            "items": [
                {
                    "product_id": i.product_id,
                    "title": i.product.title,
                    "unit": i.product.unit,
                    "quantity": line.quantity,
                    "unit_price": line.unit_price,
                    "line_total": money(line.line_total),
                }
                for i, line in zip(items, lines)
            ],
            "subtotal": money(aggregator.subtotal(lines)),
            "item_count": aggregator.item_count(lines),
        }

    #commands
    def add_product(self, buyer_id: str, product_id: str, quantity: int = 1) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")

        product = self.products.get_product(product_id)
        if not product or product.status != "active":
            raise NotFoundError("Product not found")

        existing_item = self.repo.get_cart_item(buyer_id, product_id)

        if existing_item:
            logger.info(
                f"Product {product_id} already in cart of {buyer_id}, quantity "
                f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
            )
            existing_item.quantity += quantity
            self.repo.add_cart_item(existing_item)
        else:
            logger.info(f"Adding product {product_id} to cart of {buyer_id}")
            self.repo.add_cart_item(
                CartItemModel(
                    buyer_id=buyer_id,
                    product_id=product_id,
                    quantity=quantity,
                )
            )

        return self.get_cart(buyer_id)

    def set_quantity(self, buyer_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
        item = self.repo.get_cart_item(buyer_id, product_id)
        if not item:
            raise NotFoundError("Product is not in the cart")

        #a line never sits at zero, dropping to 0 removes it
        if quantity <= 0:
            return self.remove_product(buyer_id, product_id)

        item.quantity = quantity
        self.repo.add_cart_item(item)
        logger.info(f"Cart of {buyer_id}: product {product_id} quantity set to {quantity}")
        return self.get_cart(buyer_id)

    def remove_product(self, buyer_id: str, product_id: str) -> Dict[str, Any]:
        logger.info(f"Removing product {product_id} from cart of {buyer_id}")

        if self.repo.delete_cart_item(buyer_id, product_id) == 0:
            raise NotFoundError("Product is not in the cart")

        return self.get_cart(buyer_id)

    def clear_cart(self, buyer_id: str) -> Dict[str, Any]:
        removed = self.repo.clear(buyer_id)
        logger.info(f"Cleared {removed} lines from cart of {buyer_id}")
        return self.get_cart(buyer_id)
