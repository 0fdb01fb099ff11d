"""
Waste Risk Factors

Each factor:
  1. Takes the raw event fields (and the department baseline if any)
  2. Looks them up in the injected ScoringTables
  3. Returns the points it contributes plus an optional explanation

Summing and ordering happen in the engine, not here.

Convention: HIGHER score = HIGHER risk. Every factor is non-negative.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from app.schemas.baseline import Baseline
from app.schemas.waste import DisposalMethod, WasteEvent, WasteType
from app.scoring.tables import DEFAULT_TABLES, ScoringTables

NO_BASELINE_FACTOR = "No baseline data available for this department"


@dataclass(frozen=True)
class FactorContribution:
    factor_name: str
    score: int
    note: Optional[str] = None


def _percent(ratio: float) -> int:
    # Halves round up: 162.5 -> 163
    return int(Decimal(ratio).quantize(Decimal(1), rounding=ROUND_HALF_UP))


# ═══════════════════════════════════════════════════════════════
# 1. BASELINE COMPARATOR  (0-40)
#    ratio = quantity / expected_daily, as a percentage
# ═══════════════════════════════════════════════════════════════
def compare_to_baseline(
    quantity: float,
    baseline: Optional[Baseline],
    tables: ScoringTables = DEFAULT_TABLES,
) -> FactorContribution:
    if baseline is None:
        return FactorContribution("Baseline", tables.no_baseline_points, NO_BASELINE_FACTOR)

    top_points = tables.deviation_bands[0][1] if tables.deviation_bands else tables.over_baseline_points

    if baseline.expected_daily <= 0:
        if quantity <= 0:
            return FactorContribution("Baseline", 0)
        return FactorContribution(
            "Baseline", top_points, "Quantity recorded against a zero expected baseline",
        )

    # Multiply first: 6 * 100 / 5 is exactly 120.0, 6 / 5 * 100 is not
    ratio = quantity * 100 / baseline.expected_daily

    for min_ratio, points in tables.deviation_bands:
        if ratio >= min_ratio:
            return FactorContribution(
                "Baseline", points, f"Quantity is {_percent(ratio)}% of expected baseline",
            )

    if ratio > 100:
        return FactorContribution("Baseline", tables.over_baseline_points)
    return FactorContribution("Baseline", 0)


# ═══════════════════════════════════════════════════════════════
# 2. CATEGORY RISK  (0-30)
#    Static severity per waste type; unknown types score 0.
# ═══════════════════════════════════════════════════════════════
def score_waste_category(
    waste_type: WasteType,
    tables: ScoringTables = DEFAULT_TABLES,
) -> FactorContribution:
    points = tables.category_points.get(waste_type, 0)
    if points >= tables.high_risk_category_points:
        return FactorContribution("Category", points, f"High-risk waste type: {_label(waste_type)}")
    return FactorContribution("Category", points)


# ═══════════════════════════════════════════════════════════════
# 3. DISPOSAL METHOD VALIDATOR
#    None when compliant, otherwise a warning naming the mismatch.
#    Types without an entry in the table are always compliant.
# ═══════════════════════════════════════════════════════════════
def check_disposal_method(
    waste_type: WasteType,
    disposal_method: DisposalMethod,
    tables: ScoringTables = DEFAULT_TABLES,
) -> Optional[str]:
    acceptable = tables.acceptable_disposal.get(waste_type)
    if acceptable is not None and disposal_method not in acceptable:
        return (
            f'Disposal method "{_label(disposal_method)}" may be inappropriate '
            f"for {_label(waste_type)} waste"
        )
    return None


def score_disposal_method(
    waste_type: WasteType,
    disposal_method: DisposalMethod,
    tables: ScoringTables = DEFAULT_TABLES,
) -> FactorContribution:
    warning = check_disposal_method(waste_type, disposal_method, tables)
    if warning:
        return FactorContribution("Disposal", tables.disposal_mismatch_points, warning)
    return FactorContribution("Disposal", 0)


# ═══════════════════════════════════════════════════════════════
# 4. PROCEDURE RISK  (0, 5, 10 or 15)
#    Both rules are evaluated; the pediatric rule extends the
#    reason from the procedure rule instead of replacing it.
# ═══════════════════════════════════════════════════════════════
def assess_procedure_risk(
    event: WasteEvent,
    tables: ScoringTables = DEFAULT_TABLES,
) -> FactorContribution:
    score = 0
    reason: Optional[str] = None
    is_sharps = event.waste_type == WasteType.SHARPS

    if (
        event.procedure_category in tables.high_risk_procedures
        and is_sharps
        and event.quantity > tables.high_risk_sharps_kg
    ):
        score += tables.high_risk_procedure_points
        reason = f"High sharps volume in {_label(event.procedure_category)}"

    if is_sharps and event.department == tables.pediatric_department:
        score += tables.pediatric_sharps_points
        reason = f"{reason} in pediatric setting" if reason else "Sharps in pediatric department"

    return FactorContribution("Procedure", score, reason)


def _label(value) -> str:
    return getattr(value, "value", value)
