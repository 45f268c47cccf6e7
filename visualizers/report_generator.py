"""Report generator rendering the workout list for the view layer."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import jinja2
import pandas as pd

from models.workout import ICONS, Workout

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Render workout lists as Markdown or HTML."""

    TEMPLATES = {
        'markdown': 'workout_list.md',
        'html': 'workout_list.html',
    }

    def __init__(self, template_dir: Path = None):
        """Initialize report generator.

        Args:
            template_dir: Directory containing list templates
        """
        self.template_dir = template_dir or Path(__file__).parent / 'templates'

        # Initialize Jinja2 environment
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(self.template_dir),
            autoescape=jinja2.select_autoescape(['html', 'xml'])
        )

        # Add custom filters
        self.jinja_env.filters['workout_icon'] = self._workout_icon
        self.jinja_env.filters['one_decimal'] = self._one_decimal
        self.jinja_env.filters['format_duration'] = self._format_duration

    def generate_workout_list(self, workouts: Sequence[Workout], format: str = 'markdown',
                              summary: Optional[Dict[str, Any]] = None) -> str:
        """Render a workout list.

        Args:
            workouts: Workouts in display order
            format: 'markdown' or 'html'
            summary: Optional totals from ``analyzers.workout_summary.summarize``

        Returns:
            Rendered content as a string
        """
        if format not in self.TEMPLATES:
            raise ValueError(f"Unsupported format: {format}")

        template = self.jinja_env.get_template(self.TEMPLATES[format])
        content = template.render(
            workouts=list(workouts),
            is_empty=not workouts,
            summary=summary,
        )
        logger.debug(f"Rendered {len(workouts)} workouts as {format}")
        return content

    def _workout_icon(self, kind: str) -> str:
        return ICONS.get(kind, '')

    def _one_decimal(self, value: float) -> str:
        """Format a metric the way the list shows it, e.g. 6.0."""
        return f"{value:.1f}"

    def _format_duration(self, minutes: float) -> str:
        """Format duration in minutes to human-readable format.

        Args:
            minutes: Duration in minutes

        Returns:
            Formatted duration string
        """
        if pd.isna(minutes):
            return ""
        total_seconds = int(round(minutes * 60))
        hours = total_seconds // 3600
        mins = (total_seconds % 3600) // 60
        seconds = total_seconds % 60

        if hours > 0:
            return f"{hours}h {mins}m {seconds}s"
        elif mins > 0:
            return f"{mins}m {seconds}s"
        else:
            return f"{seconds}s"
