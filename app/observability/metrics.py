from prometheus_client import Counter

# Scrape-and-publish runs
publish_runs_total = Counter(
    "catalog_publish_runs_total",
    "Total number of catalog publish runs",
    ["status"] # status: success, error
)

published_products_total = Counter(
    "catalog_products_published_total",
    "Total number of products written to artifacts"
)

# Storage liveness probes
storage_health_checks_total = Counter(
    "storage_health_checks_total",
    "Total number of storage health checks",
    ["backend", "live"]
)
