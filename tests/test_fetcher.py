"""Tests for srpmtools.fetcher module."""

import pytest
import requests

from srpmtools.exceptions import AcquisitionError
from srpmtools.fetcher import SRPMFetcher


@pytest.fixture
def srpm_file(tmp_path):
    srpm = tmp_path / "test-package-1.0.0-1.fc40.src.rpm"
    srpm.write_bytes(b"fake srpm content")
    return srpm


@pytest.fixture
def dest_dir(tmp_path):
    dest = tmp_path / "SRPMS"
    dest.mkdir()
    return dest


@pytest.fixture
def mock_get(mocker):
    mock = mocker.patch("srpmtools.fetcher.requests.get")
    mock.return_value.iter_content.return_value = [b"fake ", b"srpm"]
    mock.return_value.raise_for_status.return_value = None
    return mock


class TestIsRemote:
    def test_http_urls(self):
        assert SRPMFetcher.is_remote("https://example.com/pkg.src.rpm")
        assert SRPMFetcher.is_remote("http://example.com/pkg.src.rpm")

    def test_local_locations(self):
        assert not SRPMFetcher.is_remote("file:///tmp/pkg.src.rpm")
        assert not SRPMFetcher.is_remote("/tmp/pkg.src.rpm")


class TestFetchLocal:
    def test_copies_plain_path(self, srpm_file, dest_dir):
        result = SRPMFetcher().fetch(str(srpm_file), str(dest_dir))

        assert result == str(dest_dir / srpm_file.name)
        assert (dest_dir / srpm_file.name).read_bytes() == b"fake srpm content"

    def test_copies_file_url(self, srpm_file, dest_dir):
        result = SRPMFetcher().fetch(f"file://{srpm_file}", str(dest_dir))

        assert result == str(dest_dir / srpm_file.name)
        assert srpm_file.exists()

    def test_missing_file(self, tmp_path, dest_dir):
        with pytest.raises(AcquisitionError, match="not found"):
            SRPMFetcher().fetch(str(tmp_path / "missing.src.rpm"), str(dest_dir))

    def test_same_file_is_not_copied(self, srpm_file):
        result = SRPMFetcher().fetch(str(srpm_file), str(srpm_file.parent))

        assert result == str(srpm_file)
        assert srpm_file.read_bytes() == b"fake srpm content"

    def test_relative_path_with_colon(self, tmp_path, dest_dir, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "pkg:1.src.rpm").write_bytes(b"epoch srpm")

        result = SRPMFetcher().fetch("pkg:1.src.rpm", str(dest_dir))

        assert result == str(dest_dir / "pkg:1.src.rpm")
        assert (dest_dir / "pkg:1.src.rpm").read_bytes() == b"epoch srpm"

    def test_unsupported_scheme(self, dest_dir):
        with pytest.raises(AcquisitionError, match="Unsupported"):
            SRPMFetcher().fetch("ftp://example.com/pkg.src.rpm", str(dest_dir))

    def test_copy_failure(self, srpm_file, tmp_path):
        with pytest.raises(AcquisitionError, match="failed to copy"):
            SRPMFetcher().fetch(str(srpm_file), str(tmp_path / "no-such-dir"))


class TestFetchRemote:
    def test_downloads_url(self, dest_dir, mock_get):
        url = "https://kojipkgs.example.com/packages/pkg/1.0/1/src/pkg-1.0-1.src.rpm"

        result = SRPMFetcher(timeout=30).fetch(url, str(dest_dir))

        assert result == str(dest_dir / "pkg-1.0-1.src.rpm")
        assert (dest_dir / "pkg-1.0-1.src.rpm").read_bytes() == b"fake srpm"
        mock_get.assert_called_once_with(url, stream=True, timeout=30)

    def test_name_is_unquoted(self, dest_dir, mock_get):
        result = SRPMFetcher().fetch("https://example.com/c%2B%2B-1.0-1.src.rpm", str(dest_dir))

        assert result == str(dest_dir / "c++-1.0-1.src.rpm")

    def test_http_error(self, dest_dir, mock_get):
        mock_get.return_value.raise_for_status.side_effect = requests.HTTPError("404 Not Found")

        with pytest.raises(AcquisitionError, match="failed to fetch url"):
            SRPMFetcher().fetch("https://example.com/pkg-1.0-1.src.rpm", str(dest_dir))

    def test_connection_error(self, dest_dir, mock_get):
        mock_get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(AcquisitionError, match="refused"):
            SRPMFetcher().fetch("https://example.com/pkg-1.0-1.src.rpm", str(dest_dir))

    def test_url_without_file_name(self, dest_dir, mock_get):
        with pytest.raises(AcquisitionError, match="file name"):
            SRPMFetcher().fetch("https://example.com/", str(dest_dir))

        mock_get.assert_not_called()

    def test_write_failure(self, tmp_path, mock_get):
        with pytest.raises(AcquisitionError, match="failed to save"):
            SRPMFetcher().fetch("https://example.com/pkg-1.0-1.src.rpm", str(tmp_path / "missing"))
