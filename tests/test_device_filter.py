"""Tests for the include/exclude device filter."""

import logging

import pytest

from smartctl_exporter.discovery.filter import DeviceFilter, DeviceFilterError


def test_no_patterns_ignores_nothing() -> None:
    device_filter = DeviceFilter()

    assert device_filter.ignored("sda") is False
    assert device_filter.ignored("loop0") is False


def test_exclude_pattern_ignores_matches() -> None:
    device_filter = DeviceFilter(exclude="^loop")

    assert device_filter.ignored("loop0") is True
    assert device_filter.ignored("loop1") is True
    assert device_filter.ignored("sda") is False


def test_include_pattern_ignores_non_matches() -> None:
    device_filter = DeviceFilter(include="^nvme")

    assert device_filter.ignored("nvme0") is False
    assert device_filter.ignored("sda") is True


def test_patterns_search_anywhere_in_name() -> None:
    device_filter = DeviceFilter(exclude="megaraid")

    assert device_filter.ignored("bus/0_megaraid_disk_01") is True


def test_exclude_takes_precedence_over_include(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        device_filter = DeviceFilter(exclude="^sdb$", include="^sd")

    assert device_filter.exclude == "^sdb$"
    assert device_filter.include is None
    assert device_filter.ignored("sdb") is True
    # Include no longer applies, so non-matching names are kept.
    assert device_filter.ignored("nvme0") is False
    assert "using exclude only" in caplog.text


@pytest.mark.parametrize(
    "exclude, include",
    [("", ""), ("^loop", ""), ("", "^sd"), ("^loop", "^sd")],
)
def test_ignored_is_stable_across_calls(exclude: str, include: str) -> None:
    device_filter = DeviceFilter(exclude=exclude, include=include)
    names = ["sda", "loop0", "nvme0", "sdb", "bus/0_megaraid_disk_00"]

    first = [device_filter.ignored(name) for name in names]
    second = [device_filter.ignored(name) for name in reversed(names)]

    assert first == list(reversed(second))
    assert first == [DeviceFilter(exclude, include).ignored(name) for name in names]


def test_invalid_pattern_raises_configuration_error() -> None:
    with pytest.raises(DeviceFilterError):
        DeviceFilter(exclude="([unclosed")

    with pytest.raises(ValueError):
        DeviceFilter(include="*bad")
