"""Tests for byte-size parsing, folder totals and formatting."""

import pytest

from labshelf.services.size_utils import calculate_folder_size, format_size, parse_size


class TestParseSize:

    def test_number_passes_through(self):
        assert parse_size(2048) == 2048
        assert parse_size(1.5) == 1.5

    @pytest.mark.parametrize("value,expected", [
        ("512 B", 512),
        ("1 KB", 1024),
        ("1.5 KB", 1536),
        ("2MB", 2 * 1024 * 1024),
        ("1 gb", 1024 ** 3),
        ("1 TB", 1024 ** 4),
    ])
    def test_human_strings(self, value, expected):
        assert parse_size(value) == expected

    @pytest.mark.parametrize("value", [None, True, "", "abc", "10 XB", "1.2.3 MB", [], float("nan")])
    def test_unreadable_values_are_none(self, value):
        assert parse_size(value) is None


class TestCalculateFolderSize:

    def test_empty(self):
        assert calculate_folder_size([]) == 0
        assert calculate_folder_size(None) == 0

    def test_mixed_numeric_and_string_sizes(self):
        files = [{"size": 1024}, {"size": "1 KB"}, {"size": 512}]
        assert calculate_folder_size(files) == 2560

    def test_unparseable_and_missing_sizes_count_as_zero(self):
        files = [{"size": "lots"}, {"name": "no size"}, {"size": None}, {"size": 100}]
        assert calculate_folder_size(files) == 100

    def test_attribute_entries(self):
        class Entry:
            def __init__(self, size):
                self.size = size

        assert calculate_folder_size([Entry(10), Entry("1 KB"), Entry(None)]) == 1034


class TestFormatSize:

    @pytest.mark.parametrize("num_bytes,expected", [
        (0, "0 B"),
        (1, "1.00 B"),
        (1023, "1023.00 B"),
        (1024, "1.00 KB"),
        (1536, "1.50 KB"),
        (1048576, "1.00 MB"),
        (104857600, "100.00 MB"),
        (102760448, "98.00 MB"),
        (1024 ** 3, "1.00 GB"),
        (1024 ** 4, "1.00 TB"),
    ])
    def test_formatting(self, num_bytes, expected):
        assert format_size(num_bytes) == expected

    def test_beyond_largest_unit_is_clamped(self):
        assert format_size(1024 ** 6) == "1024.00 PB"

    def test_fractional_bytes_do_not_go_below_bytes(self):
        assert format_size(0.5) == "0.50 B"
