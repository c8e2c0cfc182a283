"""Documents read by the sales dashboard.

Sales, their line items and cash drawer entries are written by the checkout
and shift screens; the reporting feature only reads them. All money fields
hold integer cents so that sums computed inside MongoDB stay exact."""

import datetime
from enum import Enum
from typing import Optional

from bson import ObjectId
from pydantic import Field
from pymongo import ASCENDING

from ...common.models import MongoModel, utcnow

SALES_COLLECTION = "sales"
SALE_ITEMS_COLLECTION = "saleitems"
CASH_DRAWER_COLLECTION = "cashdrawers"
PRODUCTS_COLLECTION = "products"


class SaleStatus(str, Enum):
    COMPLETED = "COMPLETED"
    REFUNDED = "REFUNDED"
    VOIDED = "VOIDED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    MOBILE = "MOBILE"
    TRANSFER = "TRANSFER"


class CashDrawerEntryType(str, Enum):
    IN = "IN"
    OUT = "OUT"
    SALE = "SALE"


class Product(MongoModel):
    name: str = Field(..., min_length=1, max_length=255)
    sku: Optional[str] = None
    price: int = Field(0, ge=0, description="Unit price in cents")
    stock: int = Field(0, ge=0)
    created_at: datetime.datetime = Field(default_factory=utcnow)


class SaleTransaction(MongoModel):
    created_at: datetime.datetime = Field(default_factory=utcnow)
    status: SaleStatus = SaleStatus.COMPLETED
    total_amount: int = Field(..., ge=0, description="Sale total in cents")
    cost_of_goods: int = Field(0, ge=0, description="Cost of the goods sold in cents")
    gross_profit: int = Field(0, description="total_amount - cost_of_goods, in cents")
    payment_method: PaymentMethod = PaymentMethod.CASH
    cashier_id: Optional[ObjectId] = None


class SaleLineItem(MongoModel):
    sale_id: ObjectId
    product_id: ObjectId
    quantity: int = Field(..., gt=0)
    price_at_sale: int = Field(..., ge=0, description="Unit price in cents when sold")
    quantity_printed: int = Field(0, ge=0, description="Units already printed on kitchen/receipt tickets")
    created_at: datetime.datetime = Field(default_factory=utcnow)


class CashDrawerEntry(MongoModel):
    created_at: datetime.datetime = Field(default_factory=utcnow)
    type: CashDrawerEntryType
    amount: int = Field(..., ge=0, description="Amount moved in cents")
    cashier_id: Optional[ObjectId] = None
    note: Optional[str] = None


# (collection, keys, options) for pymongo's create_index. The dashboard filters
# every collection on its timestamp and joins line items on saleId/productId.
INDEXES = [
    (SALES_COLLECTION, [("createdAt", ASCENDING)], {}),
    (SALES_COLLECTION, [("status", ASCENDING), ("createdAt", ASCENDING)], {}),
    (SALES_COLLECTION, [("cashierId", ASCENDING), ("createdAt", ASCENDING)], {}),
    (SALE_ITEMS_COLLECTION, [("saleId", ASCENDING)], {}),
    (SALE_ITEMS_COLLECTION, [("productId", ASCENDING)], {}),
    (SALE_ITEMS_COLLECTION, [("saleId", ASCENDING), ("productId", ASCENDING)], {}),
    (CASH_DRAWER_COLLECTION, [("createdAt", ASCENDING)], {}),
    (CASH_DRAWER_COLLECTION, [("cashierId", ASCENDING), ("createdAt", ASCENDING)], {}),
]
