"""Tests for the prescription session reducer and orchestrator."""

import pytest
from pydantic import ValidationError

from mobility_rx.models.prescription import PrescriptionField
from mobility_rx.prescription.goals import to_goal_entries
from mobility_rx.prescription.session import (
    EventType,
    PrescriptionEvent,
    PrescriptionSession,
    SessionMode,
    initial_state,
    reduce,
)


@pytest.fixture
def session(baseline, ward_patient, settings):
    return PrescriptionSession(baseline, ward_patient, settings=settings)


def _energy(params) -> float:
    return params.power_watts * params.duration_minutes * params.sessions_per_day


class TestInitialState:
    def test_seeded_from_baseline(self, session):
        assert session.mode == SessionMode.FREE
        assert session.parameters.power_watts == 35
        assert session.parameters.duration_minutes == 15
        assert session.parameters.sessions_per_day == 2
        assert session.parameters.resistance_level == 5
        assert session.target_daily_energy == 1050

    def test_baseline_resistance_is_used(self, ward_patient, settings):
        from mobility_rx.models.prescription import BaselineRecommendation

        baseline = BaselineRecommendation(
            watt_goal=30, duration_min_per_session=10, sessions_per_day=1, resistance_level=3
        )
        session = PrescriptionSession(baseline, ward_patient, settings=settings)
        assert session.parameters.resistance_level == 3
        assert session.target_daily_energy == 300

    def test_locked_target_matches_parameters(self, ward_patient, settings):
        from mobility_rx.models.prescription import BaselineRecommendation

        baseline = BaselineRecommendation(
            watt_goal=35, duration_min_per_session=15, sessions_per_day=2, total_daily_energy=1400
        )
        locked = PrescriptionSession(baseline, ward_patient, maintain_energy=True, settings=settings)
        assert locked.target_daily_energy == pytest.approx(1050)
        assert locked.target_daily_energy == pytest.approx(_energy(locked.parameters))

        free = PrescriptionSession(baseline, ward_patient, settings=settings)
        assert free.target_daily_energy == 1400

    def test_locked_reset_keeps_invariant(self, ward_patient, settings):
        from mobility_rx.models.prescription import BaselineRecommendation

        baseline = BaselineRecommendation(
            watt_goal=35, duration_min_per_session=15, sessions_per_day=2, total_daily_energy=1400
        )
        locked = PrescriptionSession(baseline, ward_patient, maintain_energy=True, settings=settings)
        locked.edit(PrescriptionField.POWER, 40)
        locked.reset()
        assert locked.target_daily_energy == pytest.approx(_energy(locked.parameters))

    def test_session_ids_are_unique(self, baseline, ward_patient):
        assert PrescriptionSession(baseline, ward_patient).session_id != PrescriptionSession(
            baseline, ward_patient
        ).session_id


class TestFreeMode:
    def test_edit_clamps_only_that_field(self, session):
        session.edit(PrescriptionField.POWER, 80)
        assert session.parameters.power_watts == 70
        assert session.parameters.duration_minutes == 15
        assert session.parameters.resistance_level == 5

    def test_energy_edit_stores_target_only(self, session):
        session.edit(PrescriptionField.ENERGY, 1400)
        assert session.target_daily_energy == 1400
        assert session.parameters.duration_minutes == 15

    def test_critical_patient_duration_bound(self, baseline, icu_patient, settings):
        session = PrescriptionSession(baseline, icu_patient, settings=settings)
        session.edit(PrescriptionField.DURATION, 30)
        assert session.parameters.duration_minutes == 20


class TestModeToggle:
    def test_entering_locked_seeds_target_from_current(self, session):
        session.edit(PrescriptionField.DURATION, 20)
        session.toggle_maintain_energy(True)
        assert session.mode == SessionMode.ENERGY_LOCKED
        assert session.target_daily_energy == pytest.approx(1400)
        assert session.parameters.duration_minutes == 20

    def test_leaving_locked_recomputes_nothing(self, session):
        session.toggle_maintain_energy(True)
        before = session.parameters
        session.toggle_maintain_energy(False)
        assert session.mode == SessionMode.FREE
        assert session.parameters == before
        assert session.target_daily_energy == 1050


class TestEnergyLocked:
    def test_resistance_scenario(self, session):
        session.toggle_maintain_energy(True)
        session.edit(PrescriptionField.RESISTANCE, 9)
        assert session.parameters.power_watts == pytest.approx(46.667, abs=1e-3)
        assert session.parameters.duration_minutes == pytest.approx(11.25, abs=1e-3)

    def test_energy_edit_retargets(self, session):
        session.toggle_maintain_energy(True)
        session.edit(PrescriptionField.ENERGY, 1400)
        assert session.target_daily_energy == 1400
        assert _energy(session.parameters) == pytest.approx(1400, abs=1)

    def test_edit_sequence_holds_dose(self, session, settings):
        session.toggle_maintain_energy(True)
        for field, value in [
            (PrescriptionField.SESSIONS, 3),
            (PrescriptionField.RESISTANCE, 6),
            (PrescriptionField.DURATION, 12),
            (PrescriptionField.POWER, 33),
        ]:
            session.edit(field, value)
            assert _energy(session.parameters) == pytest.approx(
                session.target_daily_energy, abs=settings.energy_tolerance_wm
            )


class TestRetargetAndReset:
    def test_retarget_uses_rescaler(self, session):
        session.retarget(1575)
        assert session.target_daily_energy == 1575
        assert session.parameters.power_watts == pytest.approx(42.87, abs=0.01)
        assert session.mode == SessionMode.FREE

    def test_retarget_clamps_target(self, session):
        session.retarget(9000)
        assert session.target_daily_energy == 3000

    def test_reset_restores_baseline(self, session):
        session.toggle_maintain_energy(True)
        session.edit(PrescriptionField.RESISTANCE, 9)
        session.reset()
        assert session.parameters.power_watts == 35
        assert session.target_daily_energy == 1050
        assert session.mode == SessionMode.ENERGY_LOCKED


class TestReducer:
    def test_reduce_is_pure(self, baseline, ward_patient):
        state = initial_state(baseline, ward_patient, maintain_energy=True)
        snapshot = state.model_dump()
        new_state = reduce(state, PrescriptionEvent(type=EventType.EDIT, field="resistance", value=9))
        assert state.model_dump() == snapshot
        assert new_state.parameters.resistance_level == 9

    def test_enabling_twice_keeps_target(self, baseline, ward_patient):
        state = initial_state(baseline, ward_patient, maintain_energy=True)
        state = state.model_copy(update={"target_daily_energy": 1200})
        event = PrescriptionEvent(type=EventType.SET_MAINTAIN_ENERGY, enabled=True)
        assert reduce(state, event).target_daily_energy == 1200

    def test_edit_event_requires_field(self):
        with pytest.raises(ValidationError):
            PrescriptionEvent(type=EventType.EDIT, value=3)

    def test_retarget_event_requires_value(self):
        with pytest.raises(ValidationError):
            PrescriptionEvent(type="retarget")


class TestFinalize:
    def test_within_recommendations_is_accepted(self, session):
        commit = session.finalize()
        assert commit.accepted
        assert len(commit.goals) == 5
        assert commit.advisories == []
        assert commit.total_daily_energy == pytest.approx(1050)

    def test_overrides_require_acknowledgement(self, session):
        session.edit(PrescriptionField.DURATION, 25)
        assert session.requires_acknowledgement
        commit = session.finalize()
        assert not commit.accepted
        assert commit.goals == []
        assert commit.advisories

    def test_acknowledged_overrides_are_accepted(self, session):
        session.edit(PrescriptionField.DURATION, 25)
        commit = session.finalize(acknowledge_overrides=True)
        assert commit.accepted
        assert commit.goals[1].target_value == "25"
        assert commit.advisories


class TestFromGoalEntries:
    def test_resumes_stored_goals(self, ward_patient, settings, baseline_parameters):
        stored = to_goal_entries(
            baseline_parameters.model_copy(update={"power_watts": 40.0, "resistance_level": 6})
        )
        session = PrescriptionSession.from_goal_entries(
            stored, ward_patient, maintain_energy=True, settings=settings
        )
        assert session.mode == SessionMode.ENERGY_LOCKED
        assert session.parameters.power_watts == 40
        assert session.parameters.resistance_level == 6
        assert session.target_daily_energy == pytest.approx(1200)
