"""
Tests for overlap clustering and column assignment.
"""

import itertools
import random

from apptimeline.domain.models import Appointment
from apptimeline.domain.overlap_grouper import OverlapGrouper, group_overlaps

from builders import at, appointment


def _columns(groups):
    return {
        member.appointment.id: (member.column, member.column_count)
        for group in groups
        for member in group.members
    }


def _max_simultaneous(appointments):
    """Largest number of appointments running at the same instant."""
    events = []
    for apt in appointments:
        events.append((apt.scheduled_at, 1))
        events.append((apt.end, -1))
    # Ends sort before starts at the same instant: touching is not overlapping.
    events.sort(key=lambda event: (event[0], event[1]))
    running = best = 0
    for _, delta in events:
        running += delta
        best = max(best, running)
    return best


class TestOverlapGrouper:
    """Tests for OverlapGrouper."""

    def test_empty_input(self):
        assert OverlapGrouper().group([]) == []

    def test_separate_appointments_get_own_groups(self):
        groups = group_overlaps([appointment("a", "09:00", 60), appointment("b", "10:30", 60)])

        assert len(groups) == 2
        assert _columns(groups) == {"a": (0, 1), "b": (0, 1)}

    def test_two_overlapping_appointments(self):
        groups = group_overlaps([appointment("b", "10:30", 60), appointment("a", "10:00", 60)])

        assert len(groups) == 1
        assert groups[0].column_count == 2
        assert _columns(groups) == {"a": (0, 2), "b": (1, 2)}

    def test_transitive_chain_reuses_freed_column(self):
        """
        A-B and B-C overlap, A-C do not. The three share one cluster, and C
        takes over the column A has freed, so the cluster is two columns wide.
        """
        a = appointment("A", "10:00", 60)
        b = appointment("B", "10:30", 60)
        c = appointment("C", "11:15", 45)

        groups = group_overlaps([c, a, b])

        assert len(groups) == 1
        assert set(groups[0].appointment_ids()) == {"A", "B", "C"}
        columns = _columns(groups)
        assert columns["A"][0] != columns["B"][0]
        assert columns["B"][0] != columns["C"][0]
        # Every member carries the same cluster-wide count.
        assert {count for _, count in columns.values()} == {groups[0].column_count}
        # C reuses A's column because A has ended by 11:15.
        assert columns["C"][0] == columns["A"][0] == 0
        assert groups[0].column_count == _max_simultaneous([a, b, c]) == 2

    def test_touching_appointments_are_not_grouped(self):
        groups = group_overlaps([appointment("a", "10:00", 60), appointment("b", "11:00", 60)])

        assert len(groups) == 2

    def test_identical_intervals_get_distinct_columns(self):
        groups = group_overlaps(
            [appointment("x", "14:00", 30), appointment("y", "14:00", 30), appointment("z", "14:00", 30)]
        )

        assert len(groups) == 1
        assert sorted(column for column, _ in _columns(groups).values()) == [0, 1, 2]
        assert groups[0].column_count == 3

    def test_zero_length_appointments_at_same_instant_do_not_share_a_column(self):
        first = Appointment(id="p", scheduled_at=at("15:00"), duration_minutes=0)
        second = Appointment(id="q", scheduled_at=at("15:00"), duration_minutes=0)

        columns = _columns(group_overlaps([first, second]))

        assert columns["p"][0] != columns["q"][0]

    def test_shorter_appointment_is_leftmost_on_tie(self):
        groups = group_overlaps([appointment("long", "09:00", 90), appointment("short", "09:00", 30)])

        assert _columns(groups) == {"short": (0, 2), "long": (1, 2)}

    def test_assignment_is_independent_of_input_order(self):
        appointments = [
            appointment("a", "09:00", 60),
            appointment("b", "09:15", 30),
            appointment("c", "09:30", 90),
            appointment("d", "10:00", 15),
            appointment("e", "13:00", 60),
        ]

        expected = _columns(group_overlaps(appointments))
        for permutation in itertools.permutations(appointments):
            assert _columns(group_overlaps(permutation)) == expected

    def test_columns_never_overlap_and_count_is_minimal(self):
        rng = random.Random(7)
        appointments = [
            appointment(
                f"apt-{index}",
                f"{rng.randint(8, 17):02d}:{rng.choice([0, 15, 30, 45]):02d}",
                rng.choice([15, 30, 45, 60, 90, 120]),
            )
            for index in range(40)
        ]

        groups = group_overlaps(appointments)

        assert sum(len(group.members) for group in groups) == len(appointments)
        for group in groups:
            for first, second in itertools.combinations(group.members, 2):
                if first.appointment.time_range().overlaps(second.appointment.time_range()):
                    assert first.column != second.column
            assert group.column_count == _max_simultaneous([m.appointment for m in group.members])

    def test_groups_do_not_overlap_each_other(self):
        appointments = [
            appointment("a", "09:00", 60),
            appointment("b", "09:30", 60),
            appointment("c", "11:00", 30),
            appointment("d", "11:10", 30),
        ]

        groups = group_overlaps(appointments)

        assert [set(group.appointment_ids()) for group in groups] == [{"a", "b"}, {"c", "d"}]
        assert [group.index for group in groups] == [0, 1]
        assert all(member.group_index == group.index for group in groups for member in group.members)
