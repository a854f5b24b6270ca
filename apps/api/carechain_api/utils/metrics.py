"""Prometheus metrics."""

from prometheus_client import Counter, Histogram

# Ledger metrics
ledger_appends = Counter(
    "carechain_ledger_appends_total",
    "Total ledger entries appended",
    ["action_type"],
)

ledger_append_failures = Counter(
    "carechain_ledger_append_failures_total",
    "Ledger appends that did not produce an entry",
    ["reason"],
)

ledger_append_duration = Histogram(
    "carechain_ledger_append_duration_seconds",
    "Ledger append duration",
)

chain_verifications = Counter(
    "carechain_chain_verifications_total",
    "Chain integrity verifications",
    ["result"],
)

# Access control metrics
access_decisions = Counter(
    "carechain_access_decisions_total",
    "Access control decisions",
    ["operation", "outcome"],
)
