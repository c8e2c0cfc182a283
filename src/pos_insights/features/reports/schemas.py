"""Dashboard report schemas

The report is serialized with camelCase keys for the dashboard front end.
Money is a ``Decimal`` with two places and is emitted as a string so no
precision is lost on the way to the browser."""
import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .periods import ReportPeriod

ZERO = Decimal("0.00")


class ReportQuery(BaseModel):
    period: ReportPeriod = Field(ReportPeriod.MONTH, description="Calendar period containing now")
    compare_to_previous: bool = Field(False, description="Add stats for the preceding window of equal length")
    year: Optional[int] = Field(None, description="Year of the monthly trend, defaults to the current year")
    start: Optional[datetime.datetime] = Field(None, description="Custom window start, overrides period")
    end: Optional[datetime.datetime] = Field(None, description="Custom window end (inclusive)")


class ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportWindowSchema(ReportModel):
    start: datetime.datetime
    end: datetime.datetime


class PeriodStats(ReportModel):
    number_of_transactions: int = 0
    total_amount_sales: Decimal = ZERO
    total_cost_of_goods: Decimal = ZERO
    total_gross_profit: Decimal = ZERO
    average_transaction_value: Decimal = ZERO


class ProductSales(ReportModel):
    product_id: str
    product_name: str
    quantity_sold: int
    total_revenue: Decimal


class MonthlyTrendEntry(ReportModel):
    month: int = Field(..., ge=1, le=12)
    number_of_transactions: int = 0
    total_amount_sales: Decimal = ZERO
    total_gross_profit: Decimal = ZERO
    items_sold: int = 0


class PaymentMethodTotal(ReportModel):
    payment_method: str
    number_of_transactions: int
    total_amount: Decimal


class RefundStats(ReportModel):
    number_of_refunds: int = 0
    total_refunded: Decimal = ZERO


class CashierSales(ReportModel):
    cashier_id: Optional[str] = None
    number_of_transactions: int
    total_amount_sales: Decimal


class HourlyStat(ReportModel):
    hour: int = Field(..., ge=0, le=23)
    number_of_transactions: int = 0
    total_amount_sales: Decimal = ZERO


class CashDrawerSummary(ReportModel):
    number_of_entries: int = 0
    cash_in: Decimal = ZERO
    cash_out: Decimal = ZERO
    cash_sales: Decimal = ZERO
    net_cash: Decimal = ZERO


class DashboardReport(ReportModel):
    period: ReportWindowSchema
    previous_period: Optional[ReportWindowSchema] = None
    compared_to_previous: bool = False
    current_period_stats: PeriodStats
    previous_period_stats: PeriodStats
    revenue_growth: Optional[Decimal] = Field(None, description="Percent change of sales vs previous period")
    transactions_growth: Optional[Decimal] = Field(None, description="Percent change of transaction count")
    items_sold_total: int
    top_products: List[ProductSales]
    monthly_trend: List[MonthlyTrendEntry]
    payment_method_breakdown: List[PaymentMethodTotal]
    refund_stats: RefundStats
    sales_by_item: List[ProductSales]
    sales_by_cashier: List[CashierSales]
    hourly_stats: List[HourlyStat]
    cash_drawer_summary: CashDrawerSummary
    year: int
    generated_in_ms: float
