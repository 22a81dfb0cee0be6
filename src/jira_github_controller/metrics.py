"""Shared OTel metrics instruments for the controller."""

from opentelemetry import metrics

METER_NAME = "jira_github_controller"

meter = metrics.get_meter(METER_NAME)

operations_total = meter.create_counter(
    name="operations_total",
    description="Orchestrated actions completed, by action and outcome",
    unit="1",
)

operation_duration = meter.create_histogram(
    name="operation_duration_seconds",
    description="Duration of orchestrated actions from busy to idle",
    unit="s",
)

validation_rejections_total = meter.create_counter(
    name="validation_rejections_total",
    description="Actions blocked by form validation before any request",
    unit="1",
)

webhook_registrations_total = meter.create_counter(
    name="webhook_registrations_total",
    description="Webhook registration batches, by outcome",
    unit="1",
)

panel_loads_total = meter.create_counter(
    name="panel_loads_total",
    description="GitHub panel loads, by outcome",
    unit="1",
)
