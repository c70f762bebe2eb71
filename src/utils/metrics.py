"""In-process metrics rendered in the Prometheus text format.

Values live in this process and reset on restart.
"""

import time
from collections import defaultdict
from dataclasses import dataclass, field

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Label for requests no route matched (404 scans)
UNMATCHED_ROUTE = "unmatched"

LabelValues = tuple[str, ...]


def _format_labels(names: LabelValues, values: LabelValues, extra: str = "") -> str:
    pairs = [f'{n}="{v}"' for n, v in zip(names, values)]
    if extra:
        pairs.append(extra)
    return "{" + ",".join(pairs) + "}" if pairs else ""


@dataclass
class _Metric:
    name: str
    help: str
    labels: LabelValues = ()

    kind = "untyped"

    def _key(self, labels: dict[str, str]) -> LabelValues:
        return tuple(labels.get(name, "") for name in self.labels)

    def _header(self) -> list[str]:
        return [f"# HELP {self.name} {self.help}", f"# TYPE {self.name} {self.kind}"]


@dataclass
class Counter(_Metric):
    """Monotonic counter."""

    kind = "counter"
    _values: dict[LabelValues, float] = field(default_factory=lambda: defaultdict(float))

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        self._values[self._key(labels)] += amount

    def get(self, **labels: str) -> float:
        return self._values.get(self._key(labels), 0.0)

    def render(self) -> list[str]:
        return self._header() + [
            f"{self.name}{_format_labels(self.labels, key)} {value}"
            for key, value in self._values.items()
        ]


@dataclass
class Gauge(Counter):
    """Counter that can also go down."""

    kind = "gauge"

    def dec(self, amount: float = 1.0, **labels: str) -> None:
        self._values[self._key(labels)] -= amount


@dataclass
class Histogram(_Metric):
    """Cumulative histogram with fixed upper bounds (seconds)."""

    kind = "histogram"
    buckets: tuple[float, ...] = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
    # Per label set: cumulative count for each bucket, then (sum, count)
    _bucket_counts: dict[LabelValues, list[int]] = field(default_factory=dict)
    _totals: dict[LabelValues, list[float]] = field(default_factory=dict)

    def observe(self, value: float, **labels: str) -> None:
        key = self._key(labels)
        counts = self._bucket_counts.setdefault(key, [0] * len(self.buckets))
        for i, bound in enumerate(self.buckets):
            if value <= bound:
                counts[i] += 1
        totals = self._totals.setdefault(key, [0.0, 0])
        totals[0] += value
        totals[1] += 1

    def render(self) -> list[str]:
        lines = self._header()
        for key, counts in self._bucket_counts.items():
            total, count = self._totals[key]
            for bound, bucket_count in zip(self.buckets, counts):
                le = _format_labels(self.labels, key, f'le="{bound}"')
                lines.append(f"{self.name}_bucket{le} {bucket_count}")
            inf = _format_labels(self.labels, key, 'le="+Inf"')
            plain = _format_labels(self.labels, key)
            lines.append(f"{self.name}_bucket{inf} {count}")
            lines.append(f"{self.name}_sum{plain} {total}")
            lines.append(f"{self.name}_count{plain} {count}")
        return lines


class MetricsRegistry:
    """Every metric the app exports."""

    def __init__(self) -> None:
        self.http_requests_total = Counter(
            "http_requests_total", "HTTP requests handled", ("method", "path", "status")
        )
        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds", "HTTP request latency", ("method", "path")
        )
        self.http_requests_in_progress = Gauge(
            "http_requests_in_progress", "HTTP requests currently being served", ("method",)
        )
        self.oauth_logins_total = Counter(
            "oauth_logins_total", "Completed OAuth callbacks by outcome", ("provider", "action")
        )
        self.cache_writes_total = Counter(
            "cache_writes_total", "Post cache write-through attempts", ("status",)
        )
        self.index_writes_total = Counter(
            "index_writes_total", "Vector index write-through attempts", ("status",)
        )

    def format_prometheus(self) -> str:
        lines: list[str] = []
        for metric in vars(self).values():
            lines.extend(metric.render())
        return "\n".join(lines) + "\n"


metrics = MetricsRegistry()


def route_label(request: Request) -> str:
    """Matched route template such as ``/api/posts/{slug}``, so label sets stay bounded."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count, time and track in-flight requests."""

    async def dispatch(self, request: Request, call_next) -> Response:
        method = request.method

        metrics.http_requests_in_progress.inc(method=method)
        started = time.monotonic()
        status = "500"
        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            elapsed = time.monotonic() - started
            # The router records the matched route in the shared scope
            path = route_label(request)
            metrics.http_requests_total.inc(method=method, path=path, status=status)
            metrics.http_request_duration_seconds.observe(elapsed, method=method, path=path)
            metrics.http_requests_in_progress.dec(method=method)
