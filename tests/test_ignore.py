"""
Tests for the Ignore Matcher.

Requires Python 3.11+.
"""

import re

import pytest

from impmon.loader.ignore import IgnoreList, matches


class TestMatches:
    """Test cases for matches()."""

    def test_exact_string(self):
        assert matches("/app/a.py", ["/app/a.py"])
        assert not matches("/app/a.py", ["/app/b.py"])

    def test_pattern_searches_anywhere(self):
        assert matches("/app/vendor/x.py", [re.compile(r"/vendor/")])
        assert not matches("/app/x.py", [re.compile(r"/vendor/")])

    def test_predicate(self):
        assert matches("/app/gen_x.py", [lambda p: "gen_" in p])
        assert not matches("/app/x.py", [lambda p: "gen_" in p])

    def test_predicate_result_is_truthiness(self):
        assert matches("/app/x.py", [lambda p: 1])
        assert not matches("/app/x.py", [lambda p: ""])

    def test_nested_lists_recurse(self):
        entries = ["/other.py", [re.compile(r"\.pyx$"), ["/app/deep.py"]]]

        assert matches("/app/deep.py", entries)
        assert matches("/app/mod.pyx", entries)
        assert not matches("/app/mod.py", entries)

    def test_stops_at_first_match(self):
        calls = []

        def spy(path: str) -> bool:
            calls.append(path)
            return False

        assert matches("/app/a.py", ["/app/a.py", spy])
        assert calls == []

    def test_empty_list_matches_nothing(self):
        assert not matches("/app/a.py", [])


class TestIgnoreList:
    """Test cases for IgnoreList."""

    def test_default_excludes_site_packages(self):
        ignore = IgnoreList()

        assert ignore.matches("/usr/lib/python3.12/site-packages/requests/api.py")
        assert ignore.matches("/usr/lib/python3/dist-packages/yaml/__init__.py")
        assert ignore.matches(r"C:\Python312\Lib\site-packages\six.py")
        assert not ignore.matches("/srv/app/handlers.py")

    def test_update_appends(self):
        ignore = IgnoreList()
        ignore.update("/srv/app/settings.py")

        assert len(ignore.entries) == 2
        assert ignore.matches("/srv/app/settings.py")
        assert ignore.matches("/venv/lib/site-packages/x.py")

    def test_leading_none_resets(self):
        ignore = IgnoreList()
        ignore.update("x")
        ignore.update(None, "a", "b")

        assert ignore.entries == ["a", "b"]
        assert not ignore.matches("/venv/lib/site-packages/x.py")

    def test_none_alone_clears(self):
        ignore = IgnoreList()
        ignore.update(None)

        assert ignore.entries == []

    def test_reset_restores_defaults(self):
        ignore = IgnoreList()
        ignore.update(None, "a")
        ignore.reset()

        assert ignore.matches("/venv/lib/site-packages/x.py")
        assert not ignore.matches("a")

    def test_custom_default_patterns(self):
        ignore = IgnoreList([r"/generated/"])

        assert ignore.matches("/srv/generated/x.py")
        assert not ignore.matches("/venv/lib/site-packages/x.py")

    def test_entries_is_a_copy(self):
        ignore = IgnoreList()
        ignore.entries.append("sneaky")

        assert "sneaky" not in ignore.entries

    @pytest.mark.parametrize("entry", [("/a.py",), ["/a.py"]])
    def test_list_argument_is_nested(self, entry):
        ignore = IgnoreList()
        ignore.update(None, entry)

        assert ignore.matches("/a.py")
