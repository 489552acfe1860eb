"""
Side-by-side placement of overlapping appointments.

This is an interval graph coloring done with a single sweep over the
appointments in start order. Greedy coloring in that order is optimal for
interval graphs, so a cluster never gets more columns than the number of
appointments running at the same instant.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from pendulum import DateTime

from .models import Appointment, ColumnAssignment, OverlapGroup

logger = logging.getLogger(__name__)


class OverlapGrouper:
    """
    Partitions appointments into overlap clusters and assigns columns.

    Algorithm:
    1. Sort by start, then shorter duration first, then id
    2. Start a new cluster whenever an appointment begins at or after the
       latest end seen in the current cluster
    3. Inside a cluster, reuse the lowest column that is free again at the
       appointment's start, otherwise open a new column
    4. Give every member the cluster-wide column count
    """

    def group(self, appointments: Iterable[Appointment]) -> List[OverlapGroup]:
        ordered = sorted(appointments, key=self._sort_key)

        groups: List[OverlapGroup] = []
        cluster: List[Tuple[Appointment, int]] = []
        column_ends: List[DateTime] = []
        cluster_end: Optional[DateTime] = None

        for appointment in ordered:
            start = appointment.scheduled_at
            end = self._occupied_until(appointment)

            if cluster_end is not None and start >= cluster_end:
                groups.append(self._close_cluster(cluster, index=len(groups)))
                cluster = []
                column_ends = []
                cluster_end = None

            column = self._free_column(column_ends, start)
            if column is None:
                column = len(column_ends)
                column_ends.append(end)
            else:
                column_ends[column] = end

            cluster.append((appointment, column))
            cluster_end = end if cluster_end is None else max(cluster_end, end)

        if cluster:
            groups.append(self._close_cluster(cluster, index=len(groups)))

        logger.debug("Grouped %d appointments into %d clusters", len(ordered), len(groups))
        return groups

    @staticmethod
    def _sort_key(appointment: Appointment):
        return appointment.scheduled_at, appointment.duration_minutes, appointment.id

    @staticmethod
    def _occupied_until(appointment: Appointment) -> DateTime:
        # A zero-length appointment still occupies its start minute.
        if appointment.duration_minutes <= 0:
            return appointment.scheduled_at.add(minutes=1)
        return appointment.end

    @staticmethod
    def _free_column(column_ends: Sequence[DateTime], start: DateTime) -> Optional[int]:
        """Lowest column whose last appointment has ended by ``start``."""
        for column, column_end in enumerate(column_ends):
            if column_end <= start:
                return column
        return None

    @staticmethod
    def _close_cluster(cluster: Sequence[Tuple[Appointment, int]], index: int) -> OverlapGroup:
        column_count = max(column for _, column in cluster) + 1
        members = tuple(
            ColumnAssignment(
                appointment=appointment,
                column=column,
                column_count=column_count,
                group_index=index,
            )
            for appointment, column in cluster
        )
        return OverlapGroup(index=index, members=members, column_count=column_count)


def group_overlaps(appointments: Iterable[Appointment]) -> List[OverlapGroup]:
    """Shortcut for ``OverlapGrouper().group(appointments)``."""
    return OverlapGrouper().group(appointments)
