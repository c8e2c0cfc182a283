"""Aggregation pipelines behind the dashboard.

Each builder returns a plain pipeline list and does no I/O. Sales are
always matched first so the createdAt/status indexes do the filtering; line
items are then joined through the saleId index. Amounts are integer cents,
so every $sum stays exact."""

from typing import Any, Optional

from ..sales.models import (
    PRODUCTS_COLLECTION,
    SALE_ITEMS_COLLECTION,
    SaleStatus,
)
from .periods import ReportWindow

Pipeline = list[dict[str, Any]]


def _match_sales(window: ReportWindow, status: SaleStatus = SaleStatus.COMPLETED) -> dict:
    return {"$match": {"status": status.value, "createdAt": window.created_at_filter()}}


def _sold_lines(window: ReportWindow) -> Pipeline:
    # One document per line item of a completed sale in the window.
    return [
        _match_sales(window),
        {
            "$lookup": {
                "from": SALE_ITEMS_COLLECTION,
                "localField": "_id",
                "foreignField": "saleId",
                "as": "items",
            }
        },
        {"$unwind": "$items"},
    ]


def period_summary(window: ReportWindow, status: SaleStatus = SaleStatus.COMPLETED) -> Pipeline:
    return [
        _match_sales(window, status),
        {
            "$group": {
                "_id": None,
                "count": {"$sum": 1},
                "totalAmount": {"$sum": "$totalAmount"},
                "costOfGoods": {"$sum": "$costOfGoods"},
                "grossProfit": {"$sum": "$grossProfit"},
            }
        },
    ]


def refunds(window: ReportWindow) -> Pipeline:
    return period_summary(window, SaleStatus.REFUNDED)


def items_sold(window: ReportWindow) -> Pipeline:
    return _sold_lines(window) + [
        {"$group": {"_id": None, "quantity": {"$sum": "$items.quantity"}}},
    ]


def product_sales(window: ReportWindow, limit: Optional[int] = None) -> Pipeline:
    """Per-product quantity and revenue, best sellers first, ties by product id."""
    pipeline = _sold_lines(window) + [
        {
            "$group": {
                "_id": "$items.productId",
                "quantity": {"$sum": "$items.quantity"},
                "revenue": {"$sum": {"$multiply": ["$items.priceAtSale", "$items.quantity"]}},
            }
        },
        {"$sort": {"quantity": -1, "_id": 1}},
    ]
    if limit is not None:
        pipeline.append({"$limit": limit})
    pipeline.append(
        {
            "$lookup": {
                "from": PRODUCTS_COLLECTION,
                "localField": "_id",
                "foreignField": "_id",
                "as": "product",
            }
        }
    )
    return pipeline


def monthly_sales(year: ReportWindow) -> Pipeline:
    return [
        _match_sales(year),
        {
            "$group": {
                "_id": {"$month": "$createdAt"},
                "count": {"$sum": 1},
                "totalAmount": {"$sum": "$totalAmount"},
                "grossProfit": {"$sum": "$grossProfit"},
            }
        },
        {"$sort": {"_id": 1}},
    ]


def monthly_items(year: ReportWindow) -> Pipeline:
    return _sold_lines(year) + [
        {"$group": {"_id": {"$month": "$createdAt"}, "quantity": {"$sum": "$items.quantity"}}},
        {"$sort": {"_id": 1}},
    ]


def _grouped_totals(window: ReportWindow, key: Any) -> Pipeline:
    return [
        _match_sales(window),
        {
            "$group": {
                "_id": key,
                "count": {"$sum": 1},
                "totalAmount": {"$sum": "$totalAmount"},
            }
        },
    ]


def payment_methods(window: ReportWindow) -> Pipeline:
    return _grouped_totals(window, "$paymentMethod") + [
        {"$sort": {"totalAmount": -1, "_id": 1}},
    ]


def sales_by_cashier(window: ReportWindow) -> Pipeline:
    return _grouped_totals(window, "$cashierId") + [
        {"$sort": {"totalAmount": -1, "_id": 1}},
    ]


def hourly_sales(window: ReportWindow) -> Pipeline:
    # Hours are UTC.
    return _grouped_totals(window, {"$hour": "$createdAt"}) + [
        {"$sort": {"_id": 1}},
    ]


def cash_drawer_movements(window: ReportWindow) -> Pipeline:
    return [
        {"$match": {"createdAt": window.created_at_filter()}},
        {"$group": {"_id": "$type", "count": {"$sum": 1}, "amount": {"$sum": "$amount"}}},
    ]
