"""HTTP request metrics in Prometheus text format.

One ``Metrics`` instance is built per application and handed to whatever needs
it (the request middleware and the /metrics route read it from ``app.state``).
Nothing here is module-global, so tests get a fresh registry per app.
"""

import threading
from dataclasses import dataclass, field
from typing import Any

DEFAULT_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


def _make_key(labels: dict[str, str] | None) -> tuple[Any, ...]:
    if not labels:
        return ()
    return tuple(sorted(labels.items()))


def _format_labels(key: tuple[Any, ...], extra: dict[str, str] | None = None) -> str:
    pairs = list(key) + list((extra or {}).items())
    if not pairs:
        return ""
    return "{" + ",".join(f'{k}="{v}"' for k, v in pairs) + "}"


def _format_value(value: float) -> str:
    if value == float("inf"):
        return "+Inf"
    return repr(float(value))


@dataclass
class Counter:
    """Monotonic counter."""

    name: str
    help: str
    labels: list[str] = field(default_factory=list)
    _values: dict[tuple[Any, ...], float] = field(default_factory=dict)

    def inc(self, labels: dict[str, str] | None = None, value: float = 1.0) -> None:
        key = _make_key(labels)
        self._values[key] = self._values.get(key, 0.0) + value

    def get(self, labels: dict[str, str] | None = None) -> float:
        return self._values.get(_make_key(labels), 0.0)

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.help}", f"# TYPE {self.name} counter"]
        for key, value in sorted(self._values.items()):
            lines.append(f"{self.name}{_format_labels(key)} {_format_value(value)}")
        return lines


@dataclass
class Histogram:
    """Cumulative-bucket histogram."""

    name: str
    help: str
    labels: list[str] = field(default_factory=list)
    buckets: tuple[float, ...] = DEFAULT_BUCKETS
    _counts: dict[tuple[Any, ...], list[int]] = field(default_factory=dict)
    _sums: dict[tuple[Any, ...], float] = field(default_factory=dict)

    def observe(self, value: float, labels: dict[str, str] | None = None) -> None:
        key = _make_key(labels)
        counts = self._counts.setdefault(key, [0] * (len(self.buckets) + 1))
        for i, bound in enumerate(self.buckets):
            if value <= bound:
                counts[i] += 1
        counts[-1] += 1  # +Inf
        self._sums[key] = self._sums.get(key, 0.0) + value

    def count(self, labels: dict[str, str] | None = None) -> int:
        counts = self._counts.get(_make_key(labels))
        return counts[-1] if counts else 0

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.help}", f"# TYPE {self.name} histogram"]
        bounds = list(self.buckets) + [float("inf")]
        for key in sorted(self._counts):
            counts = self._counts[key]
            for bound, cumulative in zip(bounds, counts):
                le = {"le": _format_value(bound)}
                lines.append(f"{self.name}_bucket{_format_labels(key, le)} {cumulative}")
            lines.append(f"{self.name}_sum{_format_labels(key)} {_format_value(self._sums[key])}")
            lines.append(f"{self.name}_count{_format_labels(key)} {counts[-1]}")
        return lines


class Metrics:
    """Registry for request counters and latency histograms."""

    def __init__(self, namespace: str = "") -> None:
        prefix = f"{namespace}_" if namespace else ""
        self._lock = threading.Lock()
        self.http_requests_total = Counter(
            name=f"{prefix}http_requests_total",
            help="Total number of HTTP requests by route, method, and status",
            labels=["route", "method", "status"],
        )
        self.http_request_duration_seconds = Histogram(
            name=f"{prefix}http_request_duration_seconds",
            help="Duration of HTTP requests in seconds",
            labels=["route", "method", "status"],
        )

    def observe_http(self, route: str, method: str, status: int | str, duration: float) -> None:
        """Record a single HTTP request."""
        labels = {"route": route, "method": method, "status": str(status)}
        with self._lock:
            self.http_requests_total.inc(labels)
            self.http_request_duration_seconds.observe(duration, labels)

    def to_prometheus_format(self) -> str:
        with self._lock:
            lines = self.http_requests_total.render() + self.http_request_duration_seconds.render()
        return "\n".join(lines) + "\n"
