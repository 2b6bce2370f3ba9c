"""
Tests for the release catalog (tfswitch/catalog.py).
"""

import pytest
from unittest.mock import patch

from tfswitch.catalog import (
    DEFAULT_MIRROR,
    RECENT_MARKER,
    ReleaseCatalog,
    fetch_catalog,
    merge_with_recent,
    parse_index,
    remove_duplicate_versions,
    strip_recent_marker,
    version_exists,
)
from tfswitch.errors import CatalogFetchError, CatalogParseError, FetchError


INDEX_HTML = """<!DOCTYPE html>
<html>
<body>
  <ul>
    <li><a href="../">../</a></li>
    <li><a href="/terraform/1.6.0-rc1/">terraform_1.6.0-rc1</a></li>
    <li><a href="/terraform/1.5.7/">terraform_1.5.7</a></li>
    <li><a href="/terraform/1.5.6/">terraform_1.5.6</a></li>
    <li><a href="/terraform/1.5.0-beta2/">terraform_1.5.0-beta2</a></li>
    <li><a href="/terraform/0.12.3/">terraform_0.12.3</a></li>
  </ul>
</body>
</html>
"""


class TestRemoveDuplicateVersions:

    def test_keeps_first_occurrence_order(self):
        assert remove_duplicate_versions(["1.0.0", "0.9.0", "1.0.0", "0.8.0", "0.9.0"]) == [
            "1.0.0", "0.9.0", "0.8.0",
        ]

    def test_empty(self):
        assert remove_duplicate_versions([]) == []


class TestParseIndex:
    """Tests for parse_index."""

    def test_all_versions_in_page_order(self):
        assert parse_index(INDEX_HTML, include_prerelease=True) == [
            "1.6.0-rc1", "1.5.7", "1.5.6", "1.5.0-beta2", "0.12.3",
        ]

    def test_stable_only(self):
        assert parse_index(INDEX_HTML, include_prerelease=False) == ["1.5.7", "1.5.6", "0.12.3"]

    def test_href_and_text_do_not_duplicate(self):
        versions = parse_index(INDEX_HTML, include_prerelease=True)
        assert len(versions) == len(set(versions))

    def test_ignores_archive_file_names(self):
        body = '<a href="/terraform/1.0.0/terraform_1.0.0_linux_amd64.zip">zip</a>'
        assert parse_index(body, include_prerelease=True) == ["1.0.0"]

    def test_no_versions(self):
        assert parse_index("<html>maintenance</html>", include_prerelease=True) == []


class TestFetchCatalog:
    """Tests for fetch_catalog."""

    @patch("tfswitch.catalog.http_get")
    def test_fetch_all(self, mock_get):
        mock_get.return_value = INDEX_HTML.encode()
        catalog = fetch_catalog(DEFAULT_MIRROR, include_prerelease=True, timeout=5, retries=2)

        assert isinstance(catalog, ReleaseCatalog)
        assert catalog.versions[0] == "1.6.0-rc1"
        assert catalog.include_prerelease is True
        assert catalog.source == DEFAULT_MIRROR
        assert len(catalog) == 5
        mock_get.assert_called_once_with(DEFAULT_MIRROR, timeout=5, retries=2)

    @patch("tfswitch.catalog.http_get")
    def test_fetch_stable(self, mock_get):
        mock_get.return_value = INDEX_HTML.encode()
        catalog = fetch_catalog(DEFAULT_MIRROR, include_prerelease=False)
        assert "1.6.0-rc1" not in catalog
        assert "1.5.7" in catalog

    @patch("tfswitch.catalog.http_get")
    def test_network_failure_is_an_error_not_an_empty_catalog(self, mock_get):
        mock_get.side_effect = FetchError("Failed to fetch: timed out", retryable=True)
        with pytest.raises(CatalogFetchError) as exc:
            fetch_catalog(DEFAULT_MIRROR)
        assert exc.value.retryable is True

    @patch("tfswitch.catalog.http_get")
    def test_unparsable_index_raises(self, mock_get):
        mock_get.return_value = b"<html>nothing here</html>"
        with pytest.raises(CatalogParseError):
            fetch_catalog(DEFAULT_MIRROR)


class TestVersionExists:

    def test_exists(self):
        catalog = ReleaseCatalog(versions=("1.0.0", "0.12.3"))
        assert version_exists("0.12.3", catalog) is True

    def test_missing(self):
        assert version_exists("9.9.9", ["1.0.0"]) is False


class TestMergeWithRecent:

    def test_recent_first_and_marked(self):
        merged = merge_with_recent(["0.12.3"], ["1.5.7", "0.12.3", "0.12.2"])
        assert merged == [f"0.12.3{RECENT_MARKER}", "1.5.7", "0.12.2"]

    def test_duplicates_across_sources_collapse(self):
        merged = merge_with_recent(["1.0.0", "1.0.0"], ["1.0.0", "1.0.0", "0.9.0"])
        assert merged == [f"1.0.0{RECENT_MARKER}", "0.9.0"]

    def test_no_recent(self):
        assert merge_with_recent([], ("1.0.0",)) == ["1.0.0"]

    def test_strip_marker(self):
        assert strip_recent_marker(f"0.12.3{RECENT_MARKER}") == "0.12.3"
        assert strip_recent_marker("0.12.3") == "0.12.3"
