"""Shared OTel metrics instruments for the service."""

from opentelemetry import metrics

METER_NAME = "notion_blog"

meter = metrics.get_meter(METER_NAME)

# Notion API metrics
notion_requests_total = meter.create_counter(
    name="notion_requests_total",
    description="Total requests sent to the Notion API",
    unit="1",
)

notion_request_duration = meter.create_histogram(
    name="notion_request_duration_seconds",
    description="Duration of Notion API requests",
    unit="s",
)

# Page generation metrics
pages_rendered_total = meter.create_counter(
    name="pages_rendered_total",
    description="Total pages generated from Notion data",
    unit="1",
)

page_cache_hits_total = meter.create_counter(
    name="page_cache_hits_total",
    description="Page requests served from the generated-page cache",
    unit="1",
)
