"""Unit tests for display formatting."""

import pytest

from mux_console.application.formatting import asset_thumbnail, format_duration, format_file_size


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0:00"), (59.9, "0:59"), (125, "2:05"), (3600, "1:00:00"), (3725, "1:02:05"), (-5, "0:00")],
)
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0.0 B"),
        (512, "512.0 B"),
        (1536, "1.5 KB"),
        (1024**3, "1.0 GB"),
        (float("nan"), "0.0 B"),
        (-1, "0.0 B"),
    ],
)
def test_format_file_size(size, expected) -> None:
    assert format_file_size(size) == expected


def test_asset_thumbnail() -> None:
    assert asset_thumbnail("abc") == (
        "https://image.mux.com/abc/thumbnail.jpg?width=320&height=180&fit_mode=crop"
    )
