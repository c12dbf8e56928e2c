import pytest

from agent_sandbox.core.steps import SETUP_STEPS, RunState, Step, validate_step_order


class TestSetupSteps:
    def test_declared_order(self):
        assert [s.name for s in SETUP_STEPS] == [
            "identity",
            "trust",
            "connectivity",
            "session",
            "singleton",
            "fleet",
        ]

    def test_session_needs_identity_and_trust(self):
        session = next(s for s in SETUP_STEPS if s.name == "session")
        assert {"identity", "trust", "connectivity"} <= set(session.depends_on)

    def test_fleet_needs_session_and_singleton(self):
        fleet = next(s for s in SETUP_STEPS if s.name == "fleet")
        assert set(fleet.depends_on) == {"session", "singleton"}

    def test_valid_order_passes(self):
        validate_step_order(SETUP_STEPS)


class TestValidateStepOrder:
    def test_dependency_after_dependent(self):
        steps = [
            Step("session", "Auth", RunState.SESSION_AUTHENTICATED, ("identity",)),
            Step("identity", "Key", RunState.IDENTITY_READY),
        ]
        with pytest.raises(ValueError, match="runs before"):
            validate_step_order(steps)

    def test_unknown_dependency(self):
        steps = [Step("fleet", "Repos", RunState.FLEET_SYNCED, ("nope",))]
        with pytest.raises(ValueError, match="unknown step"):
            validate_step_order(steps)

    def test_duplicate_names(self):
        steps = [
            Step("identity", "Key", RunState.IDENTITY_READY),
            Step("identity", "Key again", RunState.IDENTITY_READY),
        ]
        with pytest.raises(ValueError, match="Duplicate"):
            validate_step_order(steps)

    def test_reordering_setup_steps_is_rejected(self):
        reordered = list(SETUP_STEPS)
        reordered[3], reordered[4] = reordered[4], reordered[3]
        with pytest.raises(ValueError):
            validate_step_order(reordered)
