"""Factories that write sales data straight into the test database."""
import datetime
from typing import Optional

import mongomock
import pytest
from bson import ObjectId

from pos_insights.features.sales.models import (
    CASH_DRAWER_COLLECTION,
    PRODUCTS_COLLECTION,
    SALE_ITEMS_COLLECTION,
    SALES_COLLECTION,
    CashDrawerEntry,
    CashDrawerEntryType,
    PaymentMethod,
    Product,
    SaleLineItem,
    SaleStatus,
    SaleTransaction,
)


class SalesData:
    def __init__(self, database: mongomock.Database):
        self.database = database

    def product(self, name: str, price: int = 0, product_id: Optional[ObjectId] = None) -> Product:
        product = Product(name=name, price=price)
        if product_id is not None:
            product.id = product_id
        self.database[PRODUCTS_COLLECTION].insert_one(product.to_document())
        return product

    def sale(
        self,
        created_at: datetime.datetime,
        total_amount: int,
        *,
        cost_of_goods: int = 0,
        status: SaleStatus = SaleStatus.COMPLETED,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        cashier_id: Optional[ObjectId] = None,
        items: tuple = (),
    ) -> SaleTransaction:
        """Stores a sale and its line items; ``items`` holds (product, quantity, unit price) tuples."""
        sale = SaleTransaction(
            created_at=created_at,
            status=status,
            total_amount=total_amount,
            cost_of_goods=cost_of_goods,
            gross_profit=total_amount - cost_of_goods,
            payment_method=payment_method,
            cashier_id=cashier_id,
        )
        self.database[SALES_COLLECTION].insert_one(sale.to_document())
        for product, quantity, price in items:
            line = SaleLineItem(
                sale_id=sale.id,
                product_id=product.id,
                quantity=quantity,
                price_at_sale=price,
                created_at=created_at,
            )
            self.database[SALE_ITEMS_COLLECTION].insert_one(line.to_document())
        return sale

    def drawer(self, created_at: datetime.datetime, entry_type: CashDrawerEntryType, amount: int) -> CashDrawerEntry:
        entry = CashDrawerEntry(created_at=created_at, type=entry_type, amount=amount)
        self.database[CASH_DRAWER_COLLECTION].insert_one(entry.to_document())
        return entry


@pytest.fixture
def sales_data(mongo_db: mongomock.Database) -> SalesData:
    return SalesData(mongo_db)
