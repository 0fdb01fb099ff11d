"""
Scoring tables — immutable configuration injected into the engine.

Every lookup the factors use lives here rather than inside the factor
functions, so a tenant-specific table set can be built with
``ScoringTables.with_overrides(...)`` without touching factor code.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from app.schemas.waste import (
    Department,
    DisposalMethod,
    ProcedureCategory,
    WasteType,
)


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


# ═══════════════════════════════════════════════════════════════
# Category severity — points awarded per waste type
# ═══════════════════════════════════════════════════════════════
CATEGORY_RISK_POINTS: Mapping[WasteType, int] = _freeze({
    WasteType.INFECTIOUS: 30,
    WasteType.RADIOACTIVE: 28,
    WasteType.CHEMICAL: 25,
    WasteType.SHARPS: 25,
    WasteType.PHARMACEUTICAL: 20,
    WasteType.GENERAL: 5,
    WasteType.RECYCLABLE: 0,
})

# Types scoring at or above this emit a "High-risk waste type" factor
HIGH_RISK_CATEGORY_POINTS = 20


# ═══════════════════════════════════════════════════════════════
# Acceptable disposal methods per waste type.
# Types missing from the map have no constraint.
# ═══════════════════════════════════════════════════════════════
ACCEPTABLE_DISPOSAL: Mapping[WasteType, frozenset[DisposalMethod]] = _freeze({
    WasteType.INFECTIOUS: frozenset({
        DisposalMethod.INCINERATION,
        DisposalMethod.AUTOCLAVE,
    }),
    WasteType.PHARMACEUTICAL: frozenset({
        DisposalMethod.INCINERATION,
        DisposalMethod.CHEMICAL_TREATMENT,
        DisposalMethod.SPECIAL_HANDLING,
    }),
    WasteType.SHARPS: frozenset({
        DisposalMethod.INCINERATION,
        DisposalMethod.AUTOCLAVE,
        DisposalMethod.SPECIAL_HANDLING,
    }),
    WasteType.CHEMICAL: frozenset({
        DisposalMethod.CHEMICAL_TREATMENT,
        DisposalMethod.INCINERATION,
        DisposalMethod.SPECIAL_HANDLING,
    }),
    WasteType.RADIOACTIVE: frozenset({DisposalMethod.SPECIAL_HANDLING}),
    WasteType.GENERAL: frozenset({
        DisposalMethod.SECURE_LANDFILL,
        DisposalMethod.RECYCLING,
    }),
    WasteType.RECYCLABLE: frozenset({DisposalMethod.RECYCLING}),
})

DISPOSAL_MISMATCH_POINTS = 20


# ═══════════════════════════════════════════════════════════════
# Procedure risk
# ═══════════════════════════════════════════════════════════════
HIGH_RISK_PROCEDURES: frozenset[ProcedureCategory] = frozenset({
    ProcedureCategory.MAJOR_SURGERY,
    ProcedureCategory.CHEMOTHERAPY,
    ProcedureCategory.EMERGENCY_RESPONSE,
})
HIGH_RISK_SHARPS_KG = 5.0
HIGH_RISK_PROCEDURE_POINTS = 10
PEDIATRIC_SHARPS_POINTS = 5


# ═══════════════════════════════════════════════════════════════
# Baseline deviation bands: (min ratio %, points), reported as a factor.
# Checked top-down; lower bounds are inclusive.
# Anything from 0 to 100 % of the expected volume scores nothing.
# ═══════════════════════════════════════════════════════════════
BASELINE_DEVIATION_BANDS: tuple[tuple[float, int], ...] = (
    (150.0, 40),
    (120.0, 25),
)
# Over baseline but below the first reported band: scored silently
OVER_BASELINE_POINTS = 10
NO_BASELINE_POINTS = 20


@dataclass(frozen=True)
class ScoringTables:
    """Bundle of every lookup the risk factors read."""
    category_points: Mapping[WasteType, int] = field(default_factory=lambda: CATEGORY_RISK_POINTS)
    high_risk_category_points: int = HIGH_RISK_CATEGORY_POINTS
    acceptable_disposal: Mapping[WasteType, frozenset[DisposalMethod]] = field(default_factory=lambda: ACCEPTABLE_DISPOSAL)
    disposal_mismatch_points: int = DISPOSAL_MISMATCH_POINTS
    high_risk_procedures: frozenset[ProcedureCategory] = HIGH_RISK_PROCEDURES
    high_risk_sharps_kg: float = HIGH_RISK_SHARPS_KG
    high_risk_procedure_points: int = HIGH_RISK_PROCEDURE_POINTS
    pediatric_department: Department = Department.PEDIATRICS
    pediatric_sharps_points: int = PEDIATRIC_SHARPS_POINTS
    deviation_bands: tuple[tuple[float, int], ...] = BASELINE_DEVIATION_BANDS
    over_baseline_points: int = OVER_BASELINE_POINTS
    no_baseline_points: int = NO_BASELINE_POINTS

    def with_overrides(self, **changes) -> "ScoringTables":
        """Copy with some tables replaced. Mappings are re-frozen."""
        for key, value in list(changes.items()):
            if isinstance(value, dict):
                changes[key] = _freeze(value)
        return replace(self, **changes)


DEFAULT_TABLES = ScoringTables()
