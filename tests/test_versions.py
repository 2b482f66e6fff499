"""Tests for vaporbench.versions — version parsing and ordering."""

from __future__ import annotations

import itertools
import unittest

from vaporbench.versions import ParsedVersion, compare_versions, parse_version, sort_versions


class TestParseVersion(unittest.TestCase):
    def test_stable(self) -> None:
        self.assertEqual(parse_version("3.5.13"), ParsedVersion(3, 5, 13, None, 0))

    def test_prerelease(self) -> None:
        self.assertEqual(parse_version("3.6.0-alpha.10"), ParsedVersion(3, 6, 0, "alpha", 10))
        self.assertEqual(parse_version("3.6.0-rc.2"), ParsedVersion(3, 6, 0, "rc", 2))

    def test_malformed_is_zero_version(self) -> None:
        for bad in ("unknown", "", "3.6", "v3.6.0", "3.6.0-gamma.1", "3.6.0-alpha", "3.6.0 "):
            with self.subTest(version=bad):
                self.assertEqual(parse_version(bad), ParsedVersion())


class TestCompareVersions(unittest.TestCase):
    def test_equal(self) -> None:
        self.assertEqual(compare_versions("3.6.0-alpha.2", "3.6.0-alpha.2"), 0)
        self.assertEqual(compare_versions("3.5.0", "3.5.0"), 0)

    def test_numeric_components(self) -> None:
        self.assertEqual(compare_versions("3.10.0", "3.9.0"), 1)
        self.assertEqual(compare_versions("2.9.9", "3.0.0"), -1)
        self.assertEqual(compare_versions("3.5.10", "3.5.2"), 1)

    def test_prerelease_number_is_numeric(self) -> None:
        self.assertEqual(compare_versions("3.6.0-alpha.2", "3.6.0-alpha.10"), -1)

    def test_stable_beats_prerelease(self) -> None:
        self.assertEqual(compare_versions("3.6.0", "3.6.0-rc.1"), 1)
        self.assertEqual(compare_versions("3.6.0-rc.9", "3.6.0"), -1)

    def test_prerelease_tier_order(self) -> None:
        self.assertEqual(compare_versions("3.6.0-alpha.1", "3.6.0-beta.1"), -1)
        self.assertEqual(compare_versions("3.6.0-beta.5", "3.6.0-rc.1"), -1)
        self.assertEqual(compare_versions("3.6.0-rc.1", "3.6.0-alpha.9"), 1)

    def test_prerelease_of_newer_patch_beats_older_stable(self) -> None:
        self.assertEqual(compare_versions("3.6.0-alpha.1", "3.5.99"), 1)

    def test_malformed_compare_equal(self) -> None:
        self.assertEqual(compare_versions("unknown", "garbage"), 0)
        self.assertEqual(compare_versions("unknown", "0.0.0"), 0)
        self.assertEqual(compare_versions("unknown", "3.6.0-alpha.1"), -1)

    def test_total_order_properties(self) -> None:
        versions = [
            "3.5.0",
            "3.6.0-alpha.1",
            "3.6.0-alpha.2",
            "3.6.0-alpha.10",
            "3.6.0-beta.1",
            "3.6.0-rc.1",
            "3.6.0",
            "3.6.1",
            "4.0.0-alpha.1",
        ]
        for a, b in itertools.product(versions, repeat=2):
            with self.subTest(a=a, b=b):
                self.assertEqual(compare_versions(a, b), -compare_versions(b, a))
        for a, b, c in itertools.product(versions, repeat=3):
            if compare_versions(a, b) < 0 and compare_versions(b, c) < 0:
                self.assertLess(compare_versions(a, c), 0)
        # The list above is already ascending.
        for i, a in enumerate(versions):
            for b in versions[i + 1 :]:
                self.assertEqual(compare_versions(a, b), -1)


class TestSortVersions(unittest.TestCase):
    def test_sort(self) -> None:
        shuffled = ["3.6.0", "3.6.0-alpha.10", "3.6.0-beta.1", "3.6.0-alpha.2", "3.5.0"]
        self.assertEqual(
            sort_versions(shuffled),
            ["3.5.0", "3.6.0-alpha.2", "3.6.0-alpha.10", "3.6.0-beta.1", "3.6.0"],
        )

    def test_sort_is_stable_for_malformed(self) -> None:
        self.assertEqual(sort_versions(["b", "3.6.0", "a"]), ["b", "a", "3.6.0"])


if __name__ == "__main__":
    unittest.main()
