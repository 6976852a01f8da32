"""
Tests for the step runner — policies, checks, fallback, plan order.
"""

import pytest

from levboot.core.engine.runner import (
    FatalStepError,
    InstallAborted,
    PlanError,
    RunReport,
    Step,
    run_step,
    run_steps,
    run_with_fallback,
    short_diagnostic,
    validate_plan,
)
from levboot.core.models.action import Action, Receipt
from levboot.core.models.step import FailurePolicy, Phase


def _ok(ctx):
    return Receipt.success(adapter="t", action_id="t")


def _fail(ctx):
    return Receipt.failure(adapter="t", action_id="t", error="line one\nthe real problem")


def _step(name="s", phase=Phase.INSTALLING, action=_ok, **kwargs) -> Step:
    return Step(name=name, phase=phase, action=action, **kwargs)


# ── Plan Tests ──────────────────────────────────────────────────────


class TestValidatePlan:
    def test_forward_plan_accepted(self):
        validate_plan([
            _step("a", Phase.INIT),
            _step("b", Phase.INIT),
            _step("c", Phase.CLONING),
            _step("d", Phase.REGISTERING_AUTOSTART),
        ])

    def test_backwards_phase_rejected(self):
        with pytest.raises(PlanError, match="comes after"):
            validate_plan([_step("a", Phase.CLONING), _step("b", Phase.INSTALLING)])

    def test_terminal_phase_rejected(self):
        with pytest.raises(PlanError, match="terminal"):
            validate_plan([_step("a", Phase.DONE)])

    def test_duplicate_names_rejected(self):
        with pytest.raises(PlanError, match="Duplicate"):
            validate_plan([_step("a"), _step("a")])

    def test_run_steps_rejects_before_running(self, step_ctx):
        calls = []

        def record(ctx):
            calls.append(1)
            return Receipt.success(adapter="t", action_id="t")

        with pytest.raises(PlanError):
            run_steps([_step("a", Phase.CLONING, record), _step("b", Phase.INIT, record)], step_ctx)
        assert calls == []


# ── run_step Tests ──────────────────────────────────────────────────


class TestRunStep:
    def test_ok(self, step_ctx):
        result = run_step(_step(), step_ctx)
        assert result.status == "ok"
        assert step_ctx.report.results == [result]
        assert step_ctx.report.phase == Phase.INSTALLING

    def test_check_satisfied_skips_action(self, step_ctx, reporter):
        def never(ctx):
            raise AssertionError("action must not run")

        result = run_step(_step(action=never, check=lambda ctx: True, description="Package git"), step_ctx)
        assert result.status == "skipped"
        assert result.detail == "already satisfied"
        assert "Package git: already satisfied" in reporter.messages("info")

    def test_check_unsatisfied_runs_action(self, step_ctx):
        assert run_step(_step(check=lambda ctx: False), step_ctx).status == "ok"

    def test_raising_check_runs_action(self, step_ctx):
        def broken(ctx):
            raise OSError("cannot tell")

        assert run_step(_step(check=broken), step_ctx).status == "ok"

    def test_skipped_receipt_reason_shown(self, step_ctx, reporter):
        result = run_step(
            _step(action=lambda ctx: Receipt.skip("t", "t", "tool not available"), description="Wake lock"),
            step_ctx,
        )
        assert result.status == "skipped"
        assert result.detail == "tool not available"
        assert "Wake lock: tool not available" in reporter.messages("info")

    def test_warn_policy_continues(self, step_ctx, reporter):
        result = run_step(
            _step(action=_fail, policy=FailurePolicy.WARN, description="yarn install", remediation="Try later."),
            step_ctx,
        )
        assert result.status == "warned"
        assert "the real problem" in result.detail
        assert step_ctx.report.warnings == ["yarn install failed: the real problem. Try later."]
        assert reporter.messages("warn") == step_ctx.report.warnings

    def test_fatal_policy_raises(self, step_ctx):
        step = _step("clone", Phase.CLONING, _fail, exit_code=2, remediation="Check network.")
        with pytest.raises(FatalStepError) as exc:
            run_step(step, step_ctx)
        err = exc.value
        assert err.step == "clone"
        assert err.exit_code == 2
        assert "the real problem" in err.diagnostic
        assert err.remediation == "Check network."
        assert step_ctx.report.results[-1].status == "failed"

    def test_exception_in_action_becomes_failure(self, step_ctx):
        def crash(ctx):
            raise ValueError("bad json")

        result = run_step(_step(action=crash, policy=FailurePolicy.WARN), step_ctx)
        assert result.status == "warned"
        assert "bad json" in result.detail

    def test_abort_propagates(self, step_ctx):
        def abort(ctx):
            raise InstallAborted("Enter value for X")

        with pytest.raises(InstallAborted):
            run_step(_step(action=abort, policy=FailurePolicy.WARN), step_ctx)


# ── run_steps Tests ─────────────────────────────────────────────────


class TestRunSteps:
    def test_all_ok(self, step_ctx):
        report = run_steps([_step("a", Phase.INIT), _step("b", Phase.CLONING)], step_ctx)
        assert report.phase == Phase.DONE
        assert report.status == "ok"
        assert report.exit_code == 0
        assert report.finished_at

    def test_warnings_do_not_stop(self, step_ctx):
        report = run_steps([_step("a", action=_fail, policy=FailurePolicy.WARN), _step("b")], step_ctx)
        assert report.status == "warnings"
        assert report.exit_code == 0
        assert [r.status for r in report.results] == ["warned", "ok"]

    def test_fatal_halts(self, step_ctx, reporter):
        calls = []

        def later(ctx):
            calls.append(1)
            return Receipt.success(adapter="t", action_id="t")

        report = run_steps(
            [
                _step("a", Phase.CLONING, _fail, exit_code=3, remediation="Fix it by hand."),
                _step("b", Phase.CONFIGURING, later),
            ],
            step_ctx,
        )
        assert calls == []
        assert report.phase == Phase.FATAL
        assert report.status == "failed"
        assert report.exit_code == 3
        assert report.fatal.step == "a"
        assert "Fix it by hand." in reporter.messages("error")

    def test_to_dict(self, step_ctx):
        report = run_steps([_step("a", action=_fail, exit_code=2)], step_ctx)
        data = report.to_dict()
        assert data["status"] == "failed"
        assert data["exit_code"] == 2
        assert data["fatal"]["step"] == "a"
        assert data["steps"][0]["status"] == "failed"
        assert data["phase"] == "fatal"

    def test_counts(self):
        report = RunReport()
        assert report.run_id.startswith("run-")
        assert report.ok_count == report.skipped_count == report.warned_count == 0


# ── Fallback Tests ──────────────────────────────────────────────────


class TestRunWithFallback:
    def _actions(self):
        return (
            Action(id="node:install:yarn", adapter="node"),
            Action(id="node:install:npm", adapter="node"),
        )

    def test_primary_ok_no_fallback(self, step_ctx, adapters):
        primary, fallback = self._actions()
        receipt = run_with_fallback(step_ctx, primary, fallback)
        assert receipt.ok
        assert adapters["node"].action_ids == ["node:install:yarn"]
        assert step_ctx.report.warnings == []

    def test_primary_fails_fallback_used(self, step_ctx, adapters):
        adapters["node"].set_failure("node:install:yarn", error="EAI_AGAIN")
        primary, fallback = self._actions()
        receipt = run_with_fallback(step_ctx, primary, fallback)
        assert receipt.ok
        assert receipt.metadata["fallback_from"] == "node:install:yarn"
        assert adapters["node"].action_ids == ["node:install:yarn", "node:install:npm"]
        assert len(step_ctx.report.warnings) == 1
        assert "EAI_AGAIN" in step_ctx.report.warnings[0]

    def test_both_fail_single_hop(self, step_ctx, adapters):
        adapters["node"].set_failure("node:install:*", error="gyp ERR!")
        primary, fallback = self._actions()
        receipt = run_with_fallback(step_ctx, primary, fallback)
        assert receipt.failed
        assert "node:install:yarn" in receipt.error
        assert "node:install:npm" in receipt.error
        assert len(adapters["node"].call_log) == 2


class TestShortDiagnostic:
    def test_last_line(self):
        assert short_diagnostic("a\n\nb\n") == "b"

    def test_empty(self):
        assert short_diagnostic("") == "no output"

    def test_clipped(self):
        assert len(short_diagnostic("x" * 500)) == 200
