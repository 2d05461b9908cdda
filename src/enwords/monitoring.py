"""Prometheus metrics for the review scheduler."""
from prometheus_client import Counter, start_http_server

# Collection metrics
words_added = Counter(
    "enwords_words_added_total",
    "Total number of words added to the study collection",
    ["source"],
)

words_learned = Counter(
    "enwords_words_learned_total",
    "Total number of words marked as learned",
)

words_removed = Counter(
    "enwords_words_removed_total",
    "Total number of words removed from the study collection",
)

# Review metrics
reviews = Counter(
    "enwords_reviews_total",
    "Total number of graded reviews",
    ["outcome"],
)

review_sessions = Counter(
    "enwords_review_sessions_total",
    "Review sessions by lifecycle event",
    ["event"],
)

# Storage metrics
storage_errors = Counter(
    "enwords_storage_errors_total",
    "Total number of persistence errors",
    ["operation"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
