"""Prometheus metrics for observability."""

import time
from collections import defaultdict
from dataclasses import dataclass, field

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware


@dataclass
class _Metric:
    name: str
    help: str
    labels: tuple[str, ...] = ()

    def _key(self, labels: dict[str, str]) -> tuple[str, ...]:
        return tuple(labels.get(label, "") for label in self.labels)

    def _label_str(self, key: tuple[str, ...], extra: str = "") -> str:
        pairs = [f'{label}="{value}"' for label, value in zip(self.labels, key)]
        if extra:
            pairs.append(extra)
        return "{" + ",".join(pairs) + "}" if pairs else ""


@dataclass
class Counter(_Metric):
    """Monotonic counter."""

    _values: dict[tuple, float] = field(default_factory=lambda: defaultdict(float))

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        self._values[self._key(labels)] += amount

    def get(self, **labels: str) -> float:
        return self._values.get(self._key(labels), 0.0)

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.help}", f"# TYPE {self.name} counter"]
        for key, value in self._values.items():
            lines.append(f"{self.name}{self._label_str(key)} {value}")
        return lines


@dataclass
class Gauge(_Metric):
    """Value that can go up and down."""

    _values: dict[tuple, float] = field(default_factory=lambda: defaultdict(float))

    def set(self, value: float, **labels: str) -> None:
        self._values[self._key(labels)] = value

    def get(self, **labels: str) -> float:
        return self._values.get(self._key(labels), 0.0)

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.help}", f"# TYPE {self.name} gauge"]
        for key, value in self._values.items():
            lines.append(f"{self.name}{self._label_str(key)} {value}")
        return lines


@dataclass
class Histogram(_Metric):
    """Histogram with fixed buckets."""

    buckets: tuple[float, ...] = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
    _counts: dict[tuple, dict[float, int]] = field(
        default_factory=lambda: defaultdict(lambda: defaultdict(int))
    )
    _sums: dict[tuple, float] = field(default_factory=lambda: defaultdict(float))
    _totals: dict[tuple, int] = field(default_factory=lambda: defaultdict(int))

    def observe(self, value: float, **labels: str) -> None:
        key = self._key(labels)
        self._sums[key] += value
        self._totals[key] += 1
        for bucket in self.buckets:
            if value <= bucket:
                self._counts[key][bucket] += 1

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.help}", f"# TYPE {self.name} histogram"]
        for key in self._sums:
            # observe() already counts cumulatively
            for bucket in self.buckets:
                count = self._counts[key].get(bucket, 0)
                le = f'le="{bucket}"'
                lines.append(f"{self.name}_bucket{self._label_str(key, le)} {count}")
            le_inf = 'le="+Inf"'
            lines.append(f"{self.name}_bucket{self._label_str(key, le_inf)} {self._totals[key]}")
            lines.append(f"{self.name}_sum{self._label_str(key)} {self._sums[key]}")
            lines.append(f"{self.name}_count{self._label_str(key)} {self._totals[key]}")
        return lines


class MetricsRegistry:
    """Registry for all metrics."""

    def __init__(self):
        # HTTP metrics
        self.http_requests_total = Counter(
            name="http_requests_total",
            help="Total number of HTTP requests",
            labels=("method", "path", "status"),
        )
        self.http_request_duration_seconds = Histogram(
            name="http_request_duration_seconds",
            help="HTTP request duration in seconds",
            labels=("method", "path"),
        )

        # Upstream GitHub metrics
        self.github_api_requests_total = Counter(
            name="github_api_requests_total",
            help="Total number of GitHub API requests",
            labels=("method", "status"),
        )

        # Auth metrics
        self.oauth_logins_total = Counter(
            name="oauth_logins_total",
            help="OAuth callback outcomes",
            labels=("outcome",),
        )
        self.sessions_active = Gauge(
            name="sessions_active",
            help="Number of sessions held in memory",
        )

        # Quick commit metrics
        self.commit_failures_total = Counter(
            name="commit_failures_total",
            help="Quick commits aborted, by failing stage and reason",
            labels=("stage", "reason"),
        )

    def format_prometheus(self) -> str:
        """Format all metrics in Prometheus exposition format."""
        lines: list[str] = []
        for metric in self.__dict__.values():
            if isinstance(metric, Counter | Gauge | Histogram):
                lines.extend(metric.render())
        return "\n".join(lines) + "\n"


# Global metrics registry
metrics = MetricsRegistry()


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP metrics."""

    async def dispatch(self, request: Request, call_next) -> Response:
        method = request.method

        start_time = time.monotonic()
        status = "500"
        try:
            response = await call_next(request)
            status = str(response.status_code)
        finally:
            duration = time.monotonic() - start_time
            path = self._route_template(request)
            metrics.http_requests_total.inc(method=method, path=path, status=status)
            metrics.http_request_duration_seconds.observe(duration, method=method, path=path)

        return response

    def _route_template(self, request: Request) -> str:
        """Label by route template so usernames and repo names stay out of label values."""
        # Set by the router once call_next has dispatched the request
        route = request.scope.get("route")
        return getattr(route, "path_format", None) or getattr(route, "path", None) or "unmatched"
