"""
Prometheus metrics — exposed via the /metrics ASGI app mounted in main.
"""
from prometheus_client import Counter, Histogram

RISK_SCORE = Histogram(
    "waste_risk_score",
    "Composite risk score per analysed waste event",
    buckets=(10, 20, 30, 40, 50, 60, 65, 70, 80, 90, 100),
)

ANOMALIES = Counter(
    "waste_anomalies_total",
    "Waste events classified as anomalous",
    ["department"],
)

NARRATIVE_OUTCOMES = Counter(
    "waste_narrative_total",
    "Narrative generation outcomes",
    ["outcome"],  # model | timeout | error | disabled
)
