from prometheus_client import Counter, Gauge, CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response
from fastapi import APIRouter


CATALOG_REQUESTS = Counter(
    "catalog_requests_total",
    "Requests issued to the catalog API",
    ["endpoint", "outcome"],
)
AVAILABILITY_CACHE_HITS = Counter("availability_cache_hits_total", "Availability cache hits")
AVAILABILITY_CACHE_MISSES = Counter("availability_cache_misses_total", "Availability cache misses")
WATCHLIST_MUTATIONS = Counter(
    "watchlist_mutations_total",
    "Watchlist writes by action",
    ["action"],
)
STALE_SEARCHES_DISCARDED = Counter(
    "stale_searches_discarded_total",
    "Search responses dropped because a newer search superseded them",
)
API_CALLS_USED = Gauge("catalog_api_calls_used", "Catalog API calls recorded for the current day")

# Build info gauge (set once at startup)
BUILD_INFO = Gauge(
    "netwatch_build_info",
    "Build info tagged with version, sha, env",
    labelnames=["version", "sha", "env"],
)

# Total API errors (incremented on 5xx)
REQUEST_ERRORS = Counter(
    "netwatch_request_errors_total",
    "Total API errors",
    ["route"],
)


router = APIRouter()


@router.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
