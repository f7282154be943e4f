"""Unit tests for the kscreen-doctor client and command emitter"""

import subprocess

import pytest

from dpm.common.config import KscreenConfig
from dpm.common.types import FixDecision, PriorityAssignment
from dpm.fix.emitter import CommandEmitter
from dpm.kscreen.doctor import KscreenDoctor, TopologyQueryError
from tests.fakes import BAD_PRIORITY_DUMP, FakeRunner, completed

DECISION = FixDecision(
    internal=PriorityAssignment("eDP-1", 1),
    externals=(PriorityAssignment("HDMI-A-1", 2), PriorityAssignment("DP-2", 3)),
)


class TestTopologyQuery:
    """Test `kscreen-doctor -o` querying"""

    def test_query_parses_stdout(self):
        """Test the status dump is read and parsed"""
        runner = FakeRunner({"kscreen-doctor": completed(stdout=BAD_PRIORITY_DUMP)})
        doctor = KscreenDoctor(KscreenConfig(), runner=runner)

        topology = doctor.topology_query()

        assert runner.calls == [["kscreen-doctor", "-o"]]
        assert [record.name for record in topology] == ["HDMI-A-1", "eDP-1", "DP-2"]

    def test_launch_failure_raises(self):
        """Test a missing executable is a TopologyQueryError"""
        doctor = KscreenDoctor(KscreenConfig(), runner=FakeRunner())

        with pytest.raises(TopologyQueryError, match="Failed to run kscreen-doctor"):
            doctor.topology_query()

    def test_timeout_raises(self):
        """Test an expired timeout is a TopologyQueryError"""
        runner = FakeRunner({"kscreen-doctor": subprocess.TimeoutExpired(["kscreen-doctor", "-o"], 2.0)})
        doctor = KscreenDoctor(KscreenConfig(timeout_seconds=2.0), runner=runner)

        with pytest.raises(TopologyQueryError, match="timed out"):
            doctor.topology_query()
        assert runner.kwargs[0]["timeout"] == 2.0

    def test_nonzero_exit_still_parsed(self):
        """Test stdout is parsed even when the query exits nonzero"""
        runner = FakeRunner({"kscreen-doctor": completed(stdout=BAD_PRIORITY_DUMP, returncode=1)})
        doctor = KscreenDoctor(KscreenConfig(), runner=runner)

        assert len(doctor.topology_query()) == 3

    def test_empty_output_is_empty_topology(self):
        """Test a query that ran but printed nothing yields no records"""
        runner = FakeRunner({"kscreen-doctor": completed(stdout="")})

        assert len(KscreenDoctor(KscreenConfig(), runner=runner).topology_query()) == 0

    def test_configured_command_and_patterns(self):
        """Test the executable and internal patterns come from config"""
        runner = FakeRunner({"/opt/kde/kscreen-doctor": completed(stdout="Output: 1 DSI-1\n\tpriority 2\n")})
        config = KscreenConfig(command="/opt/kde/kscreen-doctor", internal_patterns=["DSI"])

        topology = KscreenDoctor(config, runner=runner).topology_query()

        assert topology.internal_first() is not None
        assert topology.internal_first().name == "DSI-1"


class TestCommandRendering:
    """Test one-invocation command rendering"""

    def test_directives_internal_first(self):
        """Test every assignment becomes one directive of a single command"""
        doctor = KscreenDoctor(KscreenConfig(), runner=FakeRunner())

        assert doctor.priorityCommand_build(DECISION) == [
            "kscreen-doctor",
            "output.eDP-1.priority.1",
            "output.HDMI-A-1.priority.2",
            "output.DP-2.priority.3",
        ]


class TestCommandEmitter:
    """Test apply and dry-run behavior"""

    def test_dry_run_spawns_nothing(self, caplog):
        """Test simulation returns success without running any process"""
        runner = FakeRunner({"kscreen-doctor": completed()})
        emitter = CommandEmitter(KscreenDoctor(KscreenConfig(), runner=runner))

        result = emitter.decision_apply(DECISION, dry_run=True)

        assert result.isSuccess()
        assert result.simulated is True
        assert runner.calls == []
        assert "Dry run mode - not executing command" in caplog.text
        assert (
            "Executing: kscreen-doctor output.eDP-1.priority.1 "
            "output.HDMI-A-1.priority.2 output.DP-2.priority.3"
        ) in caplog.text

    def test_apply_success(self):
        """Test exit status 0 is success and the command runs exactly once"""
        runner = FakeRunner({"kscreen-doctor": completed()})
        emitter = CommandEmitter(KscreenDoctor(KscreenConfig(), runner=runner))

        result = emitter.decision_apply(DECISION, dry_run=False)

        assert result.isSuccess()
        assert result.simulated is False
        assert len(runner.calls) == 1
        assert runner.calls[0][1:] == [
            "output.eDP-1.priority.1",
            "output.HDMI-A-1.priority.2",
            "output.DP-2.priority.3",
        ]

    def test_apply_failure_carries_exit_code(self, caplog):
        """Test a nonzero exit status is reported with its code"""
        runner = FakeRunner({"kscreen-doctor": completed(returncode=3)})
        emitter = CommandEmitter(KscreenDoctor(KscreenConfig(), runner=runner))

        result = emitter.decision_apply(DECISION, dry_run=False)

        assert not result.isSuccess()
        assert result.exit_code == 3
        assert "exit code: 3" in caplog.text

    def test_launch_failure_is_127(self):
        """Test a command that cannot be launched reports 127"""
        emitter = CommandEmitter(KscreenDoctor(KscreenConfig(), runner=FakeRunner()))

        result = emitter.decision_apply(DECISION, dry_run=False)

        assert result.exit_code == 127

    def test_timeout_is_124(self):
        """Test a command that exceeds the timeout reports 124"""
        runner = FakeRunner({"kscreen-doctor": subprocess.TimeoutExpired(["kscreen-doctor"], 1.0)})
        emitter = CommandEmitter(KscreenDoctor(KscreenConfig(timeout_seconds=1.0), runner=runner))

        assert emitter.decision_apply(DECISION, dry_run=False).exit_code == 124
