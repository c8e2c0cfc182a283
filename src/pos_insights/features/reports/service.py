"""
Dashboard Report Service

Builds the sales dashboard report. Every section comes from its own
aggregation pipeline; the pipelines are independent, so they are dispatched
together in one task group and merged once all of them have returned. The
first failure cancels the rest and surfaces as a single QueryFailure: the
dashboard is either complete or not returned at all.
"""

import asyncio
import datetime
import logging
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from pymongo.errors import PyMongoError

from ...core.config import REPORT_QUERY_TIMEOUT_SECONDS, TOP_PRODUCTS_LIMIT
from ..sales.models import (
    CASH_DRAWER_COLLECTION,
    SALES_COLLECTION,
    CashDrawerEntryType,
)
from . import pipelines
from .exceptions import QueryFailure
from .executor import QueryExecutor
from .periods import (
    HOURS,
    MONTHS,
    ReportWindow,
    previous_window,
    validate_window,
    validate_year,
    year_window,
)
from .schemas import (
    ZERO,
    CashDrawerSummary,
    CashierSales,
    DashboardReport,
    HourlyStat,
    MonthlyTrendEntry,
    PaymentMethodTotal,
    PeriodStats,
    ProductSales,
    RefundStats,
    ReportWindowSchema,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
UNKNOWN_PRODUCT = "Unknown product"

Rows = list[dict[str, Any]]


def cents_to_decimal(value: Any) -> Decimal:
    return (Decimal(value or 0) / 100).quantize(CENT, rounding=ROUND_HALF_UP)


async def _run_sub_query(
    executor: QueryExecutor, name: str, collection: str, pipeline: pipelines.Pipeline, timeout: float
) -> Rows:
    started = time.perf_counter()
    try:
        rows = await asyncio.wait_for(
            executor.aggregate(collection, pipeline, comment=f"dashboard:{name}"), timeout
        )
    except TimeoutError as exc:
        logger.error(f"Dashboard sub-query {name} timed out after {timeout}s")
        raise QueryFailure(name, f"timed out after {timeout}s") from exc
    except PyMongoError as exc:
        logger.error(f"Dashboard sub-query {name} failed: {exc}")
        raise QueryFailure(name, str(exc)) from exc
    logger.debug(f"Sub-query {name} returned {len(rows)} row(s) in {(time.perf_counter() - started) * 1000:.1f} ms")
    return rows


async def _skipped() -> Rows:
    return []


async def _dispatch(
    executor: QueryExecutor,
    sub_queries: dict[str, Optional[tuple[str, pipelines.Pipeline]]],
    timeout: float,
) -> dict[str, Rows]:
    """Runs every sub-query concurrently and waits for all of them.

    A ``None`` entry is a skipped sub-query: it still occupies a slot and
    completes with no rows, without touching the store.
    """
    try:
        async with asyncio.TaskGroup() as group:
            tasks = {
                name: group.create_task(
                    _run_sub_query(executor, name, *query, timeout) if query else _skipped(),
                    name=f"dashboard:{name}",
                )
                for name, query in sub_queries.items()
            }
    except ExceptionGroup as failures:
        # Siblings are already cancelled; report the first failure only.
        raise failures.exceptions[0]
    return {name: task.result() for name, task in tasks.items()}


def _first(rows: Rows) -> dict[str, Any]:
    return rows[0] if rows else {}


def _period_stats(rows: Rows) -> PeriodStats:
    row = _first(rows)
    count = int(row.get("count", 0))
    total = cents_to_decimal(row.get("totalAmount"))
    average = (total / count).quantize(CENT, rounding=ROUND_HALF_UP) if count else ZERO
    return PeriodStats(
        number_of_transactions=count,
        total_amount_sales=total,
        total_cost_of_goods=cents_to_decimal(row.get("costOfGoods")),
        total_gross_profit=cents_to_decimal(row.get("grossProfit")),
        average_transaction_value=average,
    )


def _product_sales(rows: Rows) -> list[ProductSales]:
    result = []
    for row in rows:
        product = row.get("product") or []
        name = product[0].get("name") if product else None
        result.append(
            ProductSales(
                product_id=str(row["_id"]),
                product_name=name or UNKNOWN_PRODUCT,
                quantity_sold=int(row["quantity"]),
                total_revenue=cents_to_decimal(row.get("revenue")),
            )
        )
    return result


def _monthly_trend(sales_rows: Rows, item_rows: Rows) -> list[MonthlyTrendEntry]:
    # The store only returns months that had sales; fill the rest with zeros.
    sales = {int(row["_id"]): row for row in sales_rows}
    items = {int(row["_id"]): int(row["quantity"]) for row in item_rows}
    return [
        MonthlyTrendEntry(
            month=month,
            number_of_transactions=int(sales.get(month, {}).get("count", 0)),
            total_amount_sales=cents_to_decimal(sales.get(month, {}).get("totalAmount")),
            total_gross_profit=cents_to_decimal(sales.get(month, {}).get("grossProfit")),
            items_sold=items.get(month, 0),
        )
        for month in MONTHS
    ]


def _hourly_stats(rows: Rows) -> list[HourlyStat]:
    by_hour = {int(row["_id"]): row for row in rows}
    return [
        HourlyStat(
            hour=hour,
            number_of_transactions=int(by_hour.get(hour, {}).get("count", 0)),
            total_amount_sales=cents_to_decimal(by_hour.get(hour, {}).get("totalAmount")),
        )
        for hour in HOURS
    ]


def _payment_methods(rows: Rows) -> list[PaymentMethodTotal]:
    return [
        PaymentMethodTotal(
            payment_method=str(row["_id"]) if row["_id"] is not None else "UNKNOWN",
            number_of_transactions=int(row["count"]),
            total_amount=cents_to_decimal(row["totalAmount"]),
        )
        for row in rows
    ]


def _sales_by_cashier(rows: Rows) -> list[CashierSales]:
    return [
        CashierSales(
            cashier_id=str(row["_id"]) if row["_id"] is not None else None,
            number_of_transactions=int(row["count"]),
            total_amount_sales=cents_to_decimal(row["totalAmount"]),
        )
        for row in rows
    ]


def _refund_stats(rows: Rows) -> RefundStats:
    row = _first(rows)
    return RefundStats(
        number_of_refunds=int(row.get("count", 0)),
        total_refunded=cents_to_decimal(row.get("totalAmount")),
    )


def _cash_drawer_summary(rows: Rows) -> CashDrawerSummary:
    amounts = {row["_id"]: cents_to_decimal(row["amount"]) for row in rows}
    cash_in = amounts.get(CashDrawerEntryType.IN.value, ZERO)
    cash_out = amounts.get(CashDrawerEntryType.OUT.value, ZERO)
    cash_sales = amounts.get(CashDrawerEntryType.SALE.value, ZERO)
    return CashDrawerSummary(
        number_of_entries=sum(int(row["count"]) for row in rows),
        cash_in=cash_in,
        cash_out=cash_out,
        cash_sales=cash_sales,
        net_cash=cash_in + cash_sales - cash_out,
    )


def _growth(current: Decimal, previous: Decimal) -> Optional[Decimal]:
    if not previous:
        return None
    return ((current - previous) / previous * 100).quantize(CENT, rounding=ROUND_HALF_UP)


def _window_schema(window: Optional[ReportWindow]) -> Optional[ReportWindowSchema]:
    if window is None:
        return None
    return ReportWindowSchema(start=window.start, end=window.end)


async def generate_dashboard_report(
    executor: QueryExecutor,
    period_start: datetime.datetime,
    period_end: datetime.datetime,
    *,
    year: int,
    compare_to_previous: bool = False,
    top_products_limit: int = TOP_PRODUCTS_LIMIT,
    timeout: float = REPORT_QUERY_TIMEOUT_SECONDS,
) -> DashboardReport:
    """
    Generates the sales dashboard report for one reporting window.

    Args:
        executor: Runs the aggregation pipelines against the record store
        period_start: Start of the reporting window (inclusive)
        period_end: End of the reporting window (inclusive)
        year: Calendar year of the twelve month trend, independent of the window
        compare_to_previous: Also compute stats for the preceding window of equal length
        top_products_limit: Number of best sellers to rank
        timeout: Seconds each sub-query may take before the report fails

    Returns:
        DashboardReport: every section filled, zeros where the window has no data,
        plus the time it took to build in ``generated_in_ms``.

    Raises:
        InvalidPeriod: the window or year is unusable; nothing was queried.
        QueryFailure: a sub-query failed or timed out; the others were cancelled.
    """
    window = validate_window(period_start, period_end)
    validate_year(year)
    previous = previous_window(window) if compare_to_previous else None
    trend = year_window(year)

    started = time.perf_counter()
    results = await _dispatch(
        executor,
        {
            "current_period": (SALES_COLLECTION, pipelines.period_summary(window)),
            "items_sold": (SALES_COLLECTION, pipelines.items_sold(window)),
            "previous_period": (SALES_COLLECTION, pipelines.period_summary(previous)) if previous else None,
            "top_products": (SALES_COLLECTION, pipelines.product_sales(window, limit=top_products_limit)),
            "monthly_trend": (SALES_COLLECTION, pipelines.monthly_sales(trend)),
            "monthly_items_trend": (SALES_COLLECTION, pipelines.monthly_items(trend)),
            "payment_methods": (SALES_COLLECTION, pipelines.payment_methods(window)),
            "refunds": (SALES_COLLECTION, pipelines.refunds(window)),
            "sales_by_item": (SALES_COLLECTION, pipelines.product_sales(window)),
            "sales_by_cashier": (SALES_COLLECTION, pipelines.sales_by_cashier(window)),
            "hourly_stats": (SALES_COLLECTION, pipelines.hourly_sales(window)),
            "cash_drawer": (CASH_DRAWER_COLLECTION, pipelines.cash_drawer_movements(window)),
        },
        timeout,
    )

    current_stats = _period_stats(results["current_period"])
    previous_stats = _period_stats(results["previous_period"])
    sections = dict(
        period=_window_schema(window),
        previous_period=_window_schema(previous),
        compared_to_previous=compare_to_previous,
        current_period_stats=current_stats,
        previous_period_stats=previous_stats,
        revenue_growth=(
            _growth(current_stats.total_amount_sales, previous_stats.total_amount_sales)
            if compare_to_previous else None
        ),
        transactions_growth=(
            _growth(
                Decimal(current_stats.number_of_transactions),
                Decimal(previous_stats.number_of_transactions),
            )
            if compare_to_previous else None
        ),
        items_sold_total=int(_first(results["items_sold"]).get("quantity", 0)),
        top_products=_product_sales(results["top_products"]),
        monthly_trend=_monthly_trend(results["monthly_trend"], results["monthly_items_trend"]),
        payment_method_breakdown=_payment_methods(results["payment_methods"]),
        refund_stats=_refund_stats(results["refunds"]),
        sales_by_item=_product_sales(results["sales_by_item"]),
        sales_by_cashier=_sales_by_cashier(results["sales_by_cashier"]),
        hourly_stats=_hourly_stats(results["hourly_stats"]),
        cash_drawer_summary=_cash_drawer_summary(results["cash_drawer"]),
        year=year,
    )
    generated_in_ms = round((time.perf_counter() - started) * 1000, 3)
    logger.info(
        f"Dashboard report for {window.start.isoformat()}..{window.end.isoformat()} "
        f"generated in {generated_in_ms:.1f} ms"
    )
    return DashboardReport(**sections, generated_in_ms=generated_in_ms)
