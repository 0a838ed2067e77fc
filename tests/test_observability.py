import json
import logging

import pytest

from civic_api.observability import JSONFormatter


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_metrics_use_route_templates(client, insert_report):
    report = await insert_report()
    await client.get(f"/api/v1/reports/track/{report.report_number}")

    r = await client.get("/metrics")
    assert r.status_code == 200
    text = r.text
    assert "http_requests_total" in text
    assert 'endpoint="/api/v1/reports/track/{report_number}"' in text
    assert report.report_number not in text


def test_json_formatter():
    record = logging.LogRecord("app.reports", logging.INFO, __file__, 10, "Report %s submitted", ("CIV1",), None)
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "Report CIV1 submitted"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "app.reports"
