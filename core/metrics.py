"""
Prometheus metrics for the license service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Activation metrics
licenses_activated_total = Counter(
    "licenses_activated_total",
    "Total device activations",
    ["kind"],
)

licenses_deactivated_total = Counter(
    "licenses_deactivated_total",
    "Total device deactivations",
)

activation_denials_total = Counter(
    "activation_denials_total",
    "Total refused activation requests",
    ["reason"],
)

devices_reconciled_total = Counter(
    "devices_reconciled_total",
    "Total activations moved to a new device id on the same machine",
)

# Maintenance metrics
records_purged_total = Counter(
    "records_purged_total",
    "Total rows removed by cleanup",
    ["table"],
)

# License store metrics
purchases_recorded_total = Counter(
    "purchases_recorded_total",
    "Total purchases received from the payment provider",
    ["result"],
)

licenses_synthesized_total = Counter(
    "licenses_synthesized_total",
    "Total licenses created during key resolution",
    ["source"],
)

license_keys_issued_total = Counter(
    "license_keys_issued_total",
    "Total locally generated license keys",
)

upstream_verifications_total = Counter(
    "upstream_verifications_total",
    "Total calls to the payment provider's verification API",
    ["result"],
)

# Cache metrics
cache_hits_total = Counter(
    "cache_hits_total",
    "Total cache hits",
    ["cache_key"],
)

cache_misses_total = Counter(
    "cache_misses_total",
    "Total cache misses",
    ["cache_key"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
