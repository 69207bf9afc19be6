"""Tests for the run_multi command line entry point."""

import httpx
import pytest

from rest_client.cli import run_multi
from rest_client.core import RestClientMulti
from rest_client.http import HttpxTransport

pytestmark = pytest.mark.order(4)


def test_parse_arguments_defaults(monkeypatch):
    monkeypatch.delenv("REST_CLIENT_LIMIT", raising=False)
    monkeypatch.delenv("REST_CLIENT_POLL_INTERVAL_US", raising=False)

    args = run_multi.parse_arguments(["http://h/a"])

    assert args.urls == ["http://h/a"]
    assert args.limit == 0
    assert args.poll_interval == 25_000
    assert args.decode is False


def test_collect_urls_from_file_and_demo(tmp_path):
    urls_file = tmp_path / "urls.txt"
    urls_file.write_text("http://h/1\n\n# comentário\nhttp://h/2\n", encoding="utf-8")

    args = run_multi.parse_arguments(["http://h/0", "--urls-file", str(urls_file), "--demo"])
    urls = run_multi.collect_urls(args)

    assert urls[:3] == ["http://h/0", "http://h/1", "http://h/2"]
    assert len(urls) == 3 + len(run_multi.DEMO_THREADS)
    assert urls[3] == "https://www.reddit.com/r/aww/.json"


def test_build_descriptors_rejects_bad_headers():
    with pytest.raises(ValueError):
        run_multi.build_descriptors(["http://h/"], [42], decode=False)


def test_build_descriptors_merges_default_headers():
    descriptors = run_multi.build_descriptors(["http://h/a"], ["Accept: application/json"], decode=True)

    pairs = dict(descriptors[0].header_pairs())
    assert pairs["Accept"] == "application/json"
    assert pairs["User-Agent"].startswith("rest-client/")
    assert descriptors[0].decode is True


def test_main_without_urls_fails(monkeypatch):
    monkeypatch.setattr(run_multi, "setup_logging", lambda **kwargs: None)
    assert run_multi.main([]) == 1


def test_main_runs_batch(monkeypatch):
    def handler(request):
        if request.url.path.endswith("/missing"):
            return httpx.Response(404)
        return httpx.Response(200, json={"path": request.url.path})

    def mock_multi(config):
        return RestClientMulti(
            config=config, transport=HttpxTransport(transport=httpx.MockTransport(handler))
        )

    monkeypatch.setattr(run_multi, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(run_multi, "RestClientMulti", mock_multi)

    exit_code = run_multi.main(
        ["http://h/a", "http://h/missing", "http://h/b", "--limit", "2", "--poll-interval", "0", "--decode"]
    )

    assert exit_code == 0
