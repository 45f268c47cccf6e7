import pytest
from datetime import datetime, timezone

from analyzers.workout_summary import summarize
from models.workout import create_cycling, create_running
from visualizers.report_generator import ReportGenerator


@pytest.fixture
def report_generator():
    return ReportGenerator()


@pytest.fixture
def workouts():
    created = datetime(2024, 4, 14, 7, 45, tzinfo=timezone.utc)
    return [
        create_running((10, 20), 5, 32, 178, created_at=created),
        create_cycling((11, 21), 27, 61, -40, created_at=created),
    ]


def test_markdown_list_shows_every_detail(report_generator, workouts):
    content = report_generator.generate_workout_list(workouts, format="markdown")

    assert "## 🏃 Running on April 14" in content
    assert "**5** km" in content
    assert "**32** min" in content
    assert "**6.4** min/km" in content
    assert "**178** spm" in content
    assert "**26.6** km/h" in content
    assert "**-40** m" in content
    assert f"`{workouts[0].id}`" in content


def test_markdown_list_in_given_order(report_generator, workouts):
    content = report_generator.generate_workout_list(list(reversed(workouts)), format="markdown")
    assert content.index("Cycling on April 14") < content.index("Running on April 14")


def test_markdown_summary_footer(report_generator, workouts):
    content = report_generator.generate_workout_list(
        workouts, format="markdown", summary=summarize(workouts)
    )
    assert "**2** workouts, **32.0** km, **1h 33m 0s**" in content


def test_empty_markdown_list(report_generator):
    content = report_generator.generate_workout_list([], format="markdown")
    assert "No workouts logged yet" in content


def test_html_list_items(report_generator, workouts):
    content = report_generator.generate_workout_list(workouts, format="html")

    assert content.count('<li class="workout') == 2
    assert f'<li class="workout workout--running" data-id="{workouts[0].id}">' in content
    assert '<li class="workout workout--cycling"' in content
    assert '<span class="workout__value">6.4</span>' in content
    assert '<span class="workout__unit">spm</span>' in content
    assert '<span class="workout__value">26.6</span>' in content
    assert '<button class="erase-record-btn">' in content


def test_html_hides_clear_button_when_empty(report_generator):
    content = report_generator.generate_workout_list([], format="html")
    assert '<button class="erase-record-btn hide">' in content
    assert "<li" not in content


def test_unsupported_format(report_generator, workouts):
    with pytest.raises(ValueError):
        report_generator.generate_workout_list(workouts, format="pdf")


@pytest.mark.parametrize("minutes, expected", [(0.5, "30s"), (61.5, "1h 1m 30s"), (45, "45m 0s")])
def test_format_duration(report_generator, minutes, expected):
    assert report_generator._format_duration(minutes) == expected
