"""Sales dashboard reporting for pos-insights

This package builds the dashboard report: current and previous period
totals, top products, a twelve month trend, payment method, cashier and
hourly breakdowns, refunds and cash drawer movements. Every figure is
computed by an aggregation pipeline inside MongoDB and the pipelines run
concurrently as one batch.

Access to the endpoint requires authentication and the dashboard view
permission. The router resolves the reporting window and delegates to the
service, which owns the batch and the merge."""
