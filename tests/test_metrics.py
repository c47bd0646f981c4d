"""Metrics registry and /metrics endpoint."""

import pytest
from httpx import AsyncClient

from community_api.metrics import Metrics


def test_observe_http_counts_and_buckets():
    metrics = Metrics()

    metrics.observe_http("/communities", "GET", 200, 0.02)
    metrics.observe_http("/communities", "GET", 200, 3.0)
    metrics.observe_http("/communities", "POST", 201, 0.001)

    labels = {"route": "/communities", "method": "GET", "status": "200"}
    assert metrics.http_requests_total.get(labels) == 2
    assert metrics.http_request_duration_seconds.count(labels) == 2


def test_prometheus_format():
    metrics = Metrics()
    metrics.observe_http("/healthz", "GET", 200, 0.02)

    text = metrics.to_prometheus_format()

    assert "# TYPE http_requests_total counter" in text
    assert 'http_requests_total{method="GET",route="/healthz",status="200"} 1.0' in text
    assert "# TYPE http_request_duration_seconds histogram" in text
    assert 'http_request_duration_seconds_bucket{method="GET",route="/healthz",status="200",le="0.01"} 0' in text
    assert 'http_request_duration_seconds_bucket{method="GET",route="/healthz",status="200",le="0.025"} 1' in text
    assert 'http_request_duration_seconds_bucket{method="GET",route="/healthz",status="200",le="+Inf"} 1' in text
    assert 'http_request_duration_seconds_count{method="GET",route="/healthz",status="200"} 1' in text


def test_namespace_prefix():
    metrics = Metrics(namespace="communities")
    metrics.observe_http("/healthz", "GET", 200, 0.1)

    assert "communities_http_requests_total{" in metrics.to_prometheus_format()


@pytest.mark.asyncio
async def test_middleware_records_route_templates(client: AsyncClient, metrics: Metrics):
    response = await client.post("/communities", json={"name": "Go"})
    community_id = response.json()["id"]
    await client.get(f"/communities/{community_id}/posts")
    await client.get("/communities/missing/posts")
    await client.get("/no/such/route")
    await client.delete(f"/communities/{community_id}/posts/missing")

    assert metrics.http_requests_total.get({"route": "/communities", "method": "POST", "status": "201"}) == 1
    posts_route = "/communities/{community_id}/posts"
    assert metrics.http_requests_total.get({"route": posts_route, "method": "GET", "status": "200"}) == 1
    assert metrics.http_requests_total.get({"route": posts_route, "method": "GET", "status": "404"}) == 1
    assert metrics.http_requests_total.get({"route": "unknown", "method": "GET", "status": "404"}) == 1
    post_route = "/communities/{community_id}/posts/{post_id}"
    assert metrics.http_requests_total.get({"route": post_route, "method": "DELETE", "status": "404"}) == 1


@pytest.mark.asyncio
async def test_metrics_endpoint(client: AsyncClient):
    await client.get("/healthz")

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert 'http_requests_total{method="GET",route="/healthz",status="200"} 1.0' in response.text
