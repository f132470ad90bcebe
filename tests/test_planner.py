"""Tests for grouped mutation planning."""
import pytest

from ospf_reconciler.config_engine import (
    DEFAULT,
    ChangeSet,
    GroupedMutationPlanner,
    InstanceId,
    MutationCall,
    MutationKind,
    ResourceRecord,
)

RED = InstanceId("1", "red")


@pytest.fixture
def current():
    return ResourceRecord(
        identity=RED,
        properties={
            "default_metric": 100,
            "log_adjacency": "none",
            "router_id": "",
            "timer_throttle_lsa_start": 10,
            "timer_throttle_lsa_hold": 4000,
            "timer_throttle_lsa_max": 8000,
            "timer_throttle_spf_start": 200,
            "timer_throttle_spf_hold": 1000,
            "timer_throttle_spf_max": 5000,
            "auto_cost": 200000,
        },
        defaults={"auto_cost": 40000},
    )


class TestGroupedMutationPlanner:
    """Tests for GroupedMutationPlanner.plan."""

    def test_empty_changeset_no_calls(self, current):
        """Nothing changed, nothing emitted."""
        assert GroupedMutationPlanner().plan(ChangeSet(RED), current) == []

    def test_ungrouped_one_call_each(self, current):
        """Independent properties are written one call each."""
        changeset = ChangeSet(RED, changes={"default_metric": 5, "router_id": "1.1.1.1"})

        calls = GroupedMutationPlanner().plan(changeset, current)

        assert calls == [
            MutationCall(MutationKind.PROPERTY, "default_metric", (5,)),
            MutationCall(MutationKind.PROPERTY, "router_id", ("1.1.1.1",)),
        ]

    def test_cost_written_in_mbps(self, current):
        """The cost call carries the canonical unit."""
        calls = GroupedMutationPlanner().plan(ChangeSet(RED, changes={"auto_cost": 100000}), current)

        assert calls == [MutationCall(MutationKind.COST, "auto_cost", (100000, "mbps"))]

    def test_single_timer_change_fills_group(self, current):
        """One changed member still sends all three values."""
        changeset = ChangeSet(RED, changes={"timer_throttle_lsa_hold": 6000})

        calls = GroupedMutationPlanner().plan(changeset, current)

        assert calls == [MutationCall(MutationKind.GROUP, "timer_throttle_lsa", (10, 6000, 8000))]

    def test_untouched_group_not_emitted(self, current):
        """Only groups with a changed member produce a call."""
        changeset = ChangeSet(RED, changes={"timer_throttle_spf_start": 50, "timer_throttle_spf_max": 9000})

        calls = GroupedMutationPlanner().plan(changeset, current)

        assert [c.target for c in calls] == ["timer_throttle_spf"]
        assert calls[0].values == (50, 1000, 9000)

    def test_mixed_changeset(self, current):
        """Ungrouped calls come first, then one call per group."""
        changeset = ChangeSet(RED, changes={
            "log_adjacency": "log",
            "timer_throttle_lsa_start": 0,
            "timer_throttle_spf_hold": 2000,
        })

        calls = GroupedMutationPlanner().plan(changeset, current)

        assert [(c.kind, c.target) for c in calls] == [
            (MutationKind.PROPERTY, "log_adjacency"),
            (MutationKind.GROUP, "timer_throttle_lsa"),
            (MutationKind.GROUP, "timer_throttle_spf"),
        ]

    def test_default_cost_resolved_from_record(self, current):
        """A pending default is resolved against the record's device default."""
        changeset = ChangeSet(RED, changes={"auto_cost": DEFAULT}, initial=True)

        calls = GroupedMutationPlanner().plan(changeset, current)

        assert calls == [MutationCall(MutationKind.COST, "auto_cost", (40000, "mbps"))]

    def test_without_record_uses_factory_defaults(self):
        """Group members fall back to intrinsic defaults with no record."""
        changeset = ChangeSet(RED, changes={"timer_throttle_spf_hold": 2000}, initial=True)

        calls = GroupedMutationPlanner().plan(changeset, None)

        assert calls[0].values == (200, 2000, 5000)

    def test_default_cost_without_record_raises(self):
        """Device default cannot be guessed without reading the instance."""
        changeset = ChangeSet(RED, changes={"auto_cost": DEFAULT}, initial=True)

        with pytest.raises(ValueError):
            GroupedMutationPlanner().plan(changeset, None)

    def test_unresolved_default_kept_when_allowed(self):
        """Previewing a create keeps the device default as a marker."""
        changeset = ChangeSet(RED, changes={"auto_cost": DEFAULT, "default_metric": 4}, initial=True)

        calls = GroupedMutationPlanner().plan(changeset, None, allow_unresolved=True)

        assert calls == [
            MutationCall(MutationKind.PROPERTY, "default_metric", (4,)),
            MutationCall(MutationKind.COST, "auto_cost", (DEFAULT, "mbps")),
        ]
        assert calls[1].describe() == "auto_cost=default mbps"
