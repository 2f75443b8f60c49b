# hackmap/metrics.py
from prometheus_client import Counter, Histogram, CollectorRegistry

# Dedicated registry to avoid collisions on reload / repeated imports
REGISTRY = CollectorRegistry(auto_describe=True)

MATCHMAKING_REQUESTS = Counter(
    "matchmaking_requests_total",
    "Number of team matchmaking requests",
    ["outcome"],
    registry=REGISTRY,
)

MATCHMAKING_LATENCY = Histogram(
    "matchmaking_latency_seconds",
    "Latency of team matchmaking (query + scoring) in seconds",
    registry=REGISTRY,
)

DB_RETRIES = Counter(
    "db_retries_total",
    "Number of database operations retried after a connection error",
    registry=REGISTRY,
)

EMAILS_SENT = Counter(
    "emails_sent_total",
    "Number of outgoing emails",
    ["kind", "outcome"],
    registry=REGISTRY,
)
