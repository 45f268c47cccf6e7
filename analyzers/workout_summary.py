"""Sorting and aggregate statistics over the workout list."""

import logging
from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd

from models.workout import CYCLING, RUNNING, Workout

logger = logging.getLogger(__name__)

# Sort keys exposed to the view layer -> frame columns
SORT_FIELDS = {
    'date': 'created_at',
    'distance': 'distance',
    'duration': 'duration',
    'metric': 'derived_metric',
    'kind': 'kind',
}


def workouts_to_frame(workouts: Sequence[Workout]) -> pd.DataFrame:
    """Build a DataFrame with one row per workout, in list order."""
    rows = [
        {
            'id': w.id,
            'kind': w.kind,
            'created_at': w.created_at,
            'lat': w.coords.lat,
            'lng': w.coords.lng,
            'distance': w.distance,
            'duration': w.duration,
            'derived_metric': w.derived_metric,
            'cadence': getattr(w, 'cadence', np.nan),
            'elevation_gain': getattr(w, 'elevation_gain', np.nan),
        }
        for w in workouts
    ]
    columns = ['id', 'kind', 'created_at', 'lat', 'lng', 'distance', 'duration',
               'derived_metric', 'cadence', 'elevation_gain']
    return pd.DataFrame(rows, columns=columns)


def sort_workouts(workouts: Sequence[Workout], field: str = 'date',
                  descending: bool = False) -> List[Workout]:
    """Return workouts ordered by ``field``.

    Args:
        workouts: Workouts to sort
        field: One of 'date', 'distance', 'duration', 'metric', 'kind'
        descending: Largest first

    Returns:
        New list; ties keep their original order
    """
    if field not in SORT_FIELDS:
        raise ValueError(f"Unsupported sort field: {field}")
    if not workouts:
        return []

    df = workouts_to_frame(workouts)
    # created_at may mix UTC offsets; compare instants
    if field == 'date':
        df['created_at'] = pd.to_datetime(df['created_at'], utc=True)
    order = df.sort_values(SORT_FIELDS[field], ascending=not descending, kind='stable').index
    return [workouts[i] for i in order]


def summarize(workouts: Sequence[Workout]) -> Dict[str, Any]:
    """Compute totals over a workout list.

    Returns:
        Dictionary with counts, totals and mean pace/speed. Means are None
        when no workout of that kind exists.
    """
    df = workouts_to_frame(workouts)

    runs = df[df['kind'] == RUNNING]
    rides = df[df['kind'] == CYCLING]

    def _mean(series: pd.Series):
        return None if series.empty else float(np.round(series.mean(), 2))

    summary = {
        'total_workouts': int(len(df)),
        'total_distance_km': float(np.round(df['distance'].sum(), 2)),
        'total_duration_minutes': float(np.round(df['duration'].sum(), 2)),
        'workouts_by_kind': {kind: int((df['kind'] == kind).sum()) for kind in (RUNNING, CYCLING)},
        'avg_pace_min_per_km': _mean(runs['derived_metric']),
        'avg_speed_kmh': _mean(rides['derived_metric']),
        'avg_cadence_spm': _mean(runs['cadence']),
        'total_elevation_gain_m': float(np.round(rides['elevation_gain'].sum(), 2)),
    }
    logger.debug(f"Summarized {summary['total_workouts']} workouts")
    return summary
