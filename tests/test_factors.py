"""
Unit tests for individual risk factors.
"""
import pytest

from app.schemas.baseline import Baseline
from app.schemas.waste import (
    Department, DisposalMethod, ProcedureCategory, Shift, WasteEvent, WasteType,
)
from app.scoring.factors import (
    NO_BASELINE_FACTOR,
    assess_procedure_risk,
    check_disposal_method,
    compare_to_baseline,
    score_disposal_method,
    score_waste_category,
)
from app.scoring.tables import DEFAULT_TABLES


def _baseline(expected_daily: float, **kwargs) -> Baseline:
    defaults = {"tenant_id": "HOSP-T01", "department": Department.ICU, "expected_daily": expected_daily}
    defaults.update(kwargs)
    return Baseline(**defaults)


def _make_event(**kwargs) -> WasteEvent:
    defaults = {
        "tenant_id": "HOSP-T01",
        "department": "Surgery",
        "waste_type": "Sharps",
        "quantity": 6.0,
        "procedure_category": "Major Surgery",
        "disposal_method": "Incineration",
        "shift": "Morning",
    }
    defaults.update(kwargs)
    return WasteEvent(**defaults)


class TestBaselineComparator:
    def test_far_over_baseline(self):
        r = compare_to_baseline(12.0, _baseline(5.0))  # 240%
        assert r.score == 40
        assert r.note == "Quantity is 240% of expected baseline"

    def test_exactly_150_percent_is_top_band(self):
        r = compare_to_baseline(7.5, _baseline(5.0))
        assert r.score == 40
        assert r.note == "Quantity is 150% of expected baseline"

    def test_between_120_and_150(self):
        r = compare_to_baseline(7.0, _baseline(5.0))  # 140%
        assert r.score == 25
        assert r.note == "Quantity is 140% of expected baseline"

    def test_exactly_120_percent_is_second_band(self):
        r = compare_to_baseline(6.0, _baseline(5.0))
        assert r.score == 25
        assert r.note == "Quantity is 120% of expected baseline"

    def test_half_percent_rounds_up(self):
        r = compare_to_baseline(6.5, _baseline(4.0))  # 162.5%
        assert r.score == 40
        assert r.note == "Quantity is 163% of expected baseline"

    def test_half_percent_rounds_up_in_second_band(self):
        r = compare_to_baseline(49.0, _baseline(40.0))  # 122.5%
        assert r.score == 25
        assert r.note == "Quantity is 123% of expected baseline"

    def test_slightly_over_is_scored_silently(self):
        r = compare_to_baseline(5.5, _baseline(5.0))  # 110%
        assert r.score == 10
        assert r.note is None

    def test_exactly_100_percent_scores_nothing(self):
        r = compare_to_baseline(5.0, _baseline(5.0))
        assert r.score == 0
        assert r.note is None

    def test_under_baseline(self):
        assert compare_to_baseline(1.0, _baseline(5.0)).score == 0

    def test_no_baseline(self):
        r = compare_to_baseline(1.0, None)
        assert r.score == 20
        assert r.note == NO_BASELINE_FACTOR

    def test_zero_expected_with_waste(self):
        r = compare_to_baseline(0.5, _baseline(0.0))
        assert r.score == 40
        assert r.note == "Quantity recorded against a zero expected baseline"

    def test_zero_expected_without_waste(self):
        r = compare_to_baseline(0.0, _baseline(0.0))
        assert r.score == 0
        assert r.note is None


class TestCategoryRisk:
    def test_all_weights(self):
        expected = {
            WasteType.INFECTIOUS: 30,
            WasteType.RADIOACTIVE: 28,
            WasteType.CHEMICAL: 25,
            WasteType.SHARPS: 25,
            WasteType.PHARMACEUTICAL: 20,
            WasteType.GENERAL: 5,
            WasteType.RECYCLABLE: 0,
        }
        for waste_type, points in expected.items():
            assert score_waste_category(waste_type).score == points

    def test_high_risk_note_at_20(self):
        r = score_waste_category(WasteType.PHARMACEUTICAL)
        assert r.note == "High-risk waste type: Pharmaceutical"

    def test_low_risk_has_no_note(self):
        assert score_waste_category(WasteType.GENERAL).note is None

    def test_unknown_type_scores_zero(self):
        tables = DEFAULT_TABLES.with_overrides(category_points={WasteType.INFECTIOUS: 30})
        r = score_waste_category(WasteType.CHEMICAL, tables)
        assert r.score == 0
        assert r.note is None


class TestDisposalMethod:
    def test_compliant(self):
        assert check_disposal_method(WasteType.INFECTIOUS, DisposalMethod.AUTOCLAVE) is None

    def test_sharps_to_landfill_is_flagged(self):
        warning = check_disposal_method(WasteType.SHARPS, DisposalMethod.SECURE_LANDFILL)
        assert warning == 'Disposal method "Secure Landfill" may be inappropriate for Sharps waste'

    def test_recyclable_only_accepts_recycling(self):
        assert check_disposal_method(WasteType.RECYCLABLE, DisposalMethod.RECYCLING) is None
        assert check_disposal_method(WasteType.RECYCLABLE, DisposalMethod.INCINERATION) is not None

    def test_radioactive_needs_special_handling(self):
        assert check_disposal_method(WasteType.RADIOACTIVE, DisposalMethod.INCINERATION) is not None

    def test_unmapped_type_is_always_compliant(self):
        tables = DEFAULT_TABLES.with_overrides(acceptable_disposal={})
        assert check_disposal_method(WasteType.RADIOACTIVE, DisposalMethod.RECYCLING, tables) is None

    def test_mismatch_scores_20(self):
        r = score_disposal_method(WasteType.SHARPS, DisposalMethod.SECURE_LANDFILL)
        assert r.score == 20
        assert "inappropriate" in r.note

    def test_match_scores_0(self):
        assert score_disposal_method(WasteType.GENERAL, DisposalMethod.RECYCLING).score == 0


class TestProcedureRisk:
    def test_high_risk_procedure_with_sharps_volume(self):
        r = assess_procedure_risk(_make_event())
        assert r.score == 10
        assert r.note == "High sharps volume in Major Surgery"

    def test_exactly_5kg_is_not_high_volume(self):
        assert assess_procedure_risk(_make_event(quantity=5.0)).score == 0

    def test_routine_procedure_no_risk(self):
        r = assess_procedure_risk(_make_event(procedure_category="Routine Care"))
        assert r.score == 0
        assert r.note is None

    def test_non_sharps_no_risk(self):
        assert assess_procedure_risk(_make_event(waste_type="Infectious", quantity=20.0)).score == 0

    def test_pediatric_sharps_alone(self):
        r = assess_procedure_risk(_make_event(
            department="Pediatrics", procedure_category="Routine Care", quantity=1.0,
        ))
        assert r.score == 5
        assert r.note == "Sharps in pediatric department"

    def test_both_rules_add_and_reason_concatenates(self):
        r = assess_procedure_risk(_make_event(department="Pediatrics", procedure_category="Chemotherapy"))
        assert r.score == 15
        assert r.note == "High sharps volume in Chemotherapy in pediatric setting"

    def test_emergency_response_counts_as_high_risk(self):
        r = assess_procedure_risk(_make_event(
            department="Emergency", procedure_category=ProcedureCategory.EMERGENCY_RESPONSE,
            shift=Shift.NIGHT, quantity=8.0,
        ))
        assert r.score == 10


class TestScoringTables:
    def test_default_tables_are_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_TABLES.category_points[WasteType.GENERAL] = 99
        assert DEFAULT_TABLES.category_points[WasteType.GENERAL] == 5

    def test_overrides_do_not_touch_defaults(self):
        tables = DEFAULT_TABLES.with_overrides(no_baseline_points=0)
        assert compare_to_baseline(1.0, None, tables).score == 0
        assert compare_to_baseline(1.0, None).score == 20
