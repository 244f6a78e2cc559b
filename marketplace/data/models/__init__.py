#import all models so SQLAlchemy registers them in Base.metadata

from marketplace.data.models.user import UserModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.delivery_method import DeliveryMethodModel
from marketplace.data.models.address import AddressModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.data.models.rfq import RFQModel
from marketplace.data.models.review import ReviewModel
from marketplace.data.models.saved_product import SavedProductModel

__all__ = [
    "UserModel",
    "ProductModel",
    "CartItemModel",
    "DeliveryMethodModel",
    "AddressModel",
    "OrderModel",
    "OrderItemModel",
    "RFQModel",
    "ReviewModel",
    "SavedProductModel",
]
