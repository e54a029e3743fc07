# register every model on Base.metadata before create_all

from acaishop.data.models.store import StoreModel
from acaishop.data.models.store_config import StoreConfigModel
from acaishop.data.models.category import CategoryModel
from acaishop.data.models.product import ProductModel
from acaishop.data.models.additional_category import AdditionalCategoryModel
from acaishop.data.models.additional import AdditionalModel
from acaishop.data.models.cart_item import CartItemModel
from acaishop.data.models.order import OrderModel
from acaishop.data.models.notification import NotificationModel
from acaishop.data.models.push_subscription import PushSubscriptionModel
from acaishop.data.models.table import TableModel

__all__ = [
    "StoreModel",
    "StoreConfigModel",
    "CategoryModel",
    "ProductModel",
    "AdditionalCategoryModel",
    "AdditionalModel",
    "CartItemModel",
    "OrderModel",
    "NotificationModel",
    "PushSubscriptionModel",
    "TableModel",
]
