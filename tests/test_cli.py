"""
Entry-point tests: argument parsing, output streams and exit codes.

run() is driven with simulators; main() only on paths that never reach
the network (cache hits, usage errors, --clear-cache).
"""

import io
import json
from datetime import datetime, timedelta, timezone

import pytest

from timein import cli
from timein.adapters.json_file_cache import JsonFileTimezoneCache
from timein.adapters.memory_lru_cache import InMemoryTimezoneCache
from timein.adapters.simulator_lookup import SimulatorGeocoder, SimulatorTimezoneProvider
from timein.adapters.zoneinfo_formatter import ZoneInfoFormatter
from timein.config import Settings
from timein.domain.timezone_cache import CacheWriteError
from timein.resolver import Resolver, ResolverConfig

FIXED_NOW = datetime(2025, 5, 2, 2, 30, tzinfo=timezone.utc)


class TTYInput(io.StringIO):
    def isatty(self):
        return True


@pytest.fixture
def cache():
    return InMemoryTimezoneCache()


@pytest.fixture
def geocoder():
    geo = SimulatorGeocoder()
    geo.inject_place("Bangkok", 13.7563, 100.5018)
    return geo


@pytest.fixture
def resolver(cache, geocoder):
    tzp = SimulatorTimezoneProvider()
    tzp.inject_zone(13.7563, 100.5018, "Asia/Bangkok")
    return Resolver(ResolverConfig(
        cache=cache,
        geocoder=geocoder,
        timezones=tzp,
        formatter=ZoneInfoFormatter(clock=lambda: FIXED_NOW),
    ))


def _run(argv, resolver, cache, output_format="plain", stdin=""):
    stdout, stderr = io.StringIO(), io.StringIO()
    stdin_io = stdin if isinstance(stdin, io.StringIO) else io.StringIO(stdin)
    code = cli.run(
        cli.parse_args(argv), resolver, cache, output_format,
        stdin_io, stdout, stderr,
    )
    return code, stdout.getvalue(), stderr.getvalue()


# ---------------------------------------------------------------------------
# parse_args
# ---------------------------------------------------------------------------


def test_parse_joins_words():
    opts = cli.parse_args(["New", "York"])
    assert opts.query == "New York"
    assert opts.output_format is None


def test_parse_flags():
    opts = cli.parse_args(["--format=alfred", "--timezone-only", "Bangkok"])
    assert opts.output_format == "alfred"
    assert opts.timezone_only is True
    assert opts.query == "Bangkok"


def test_parse_format_as_separate_arg():
    assert cli.parse_args(["--format", "alfred", "Rome"]).output_format == "alfred"


def test_parse_double_dash_ends_flags():
    assert cli.parse_args(["--", "--weird-place"]).query == "--weird-place"


def test_parse_no_query():
    assert cli.parse_args([]).query is None


def test_parse_zone_flag():
    opts = cli.parse_args(["--zone", "Asia/Tokyo"])
    assert opts.zone is True
    assert opts.query == "Asia/Tokyo"


@pytest.mark.parametrize("argv", [["--nope"], ["--format"], ["--zone", "--timezone-only", "Tokyo"]])
def test_parse_rejects_bad_flags(argv):
    with pytest.raises(ValueError):
        cli.parse_args(argv)


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


def test_plain_success(resolver, cache):
    code, out, err = _run(["Bangkok"], resolver, cache)
    assert code == 0
    assert out == "Asia/Bangkok - Fri, May 2, 9:30 AM\n"
    assert err == ""


def test_timezone_only(resolver, cache):
    code, out, _ = _run(["--timezone-only", "Bangkok"], resolver, cache)
    assert code == 0
    assert out == "Asia/Bangkok\n"


def test_query_read_from_stdin(resolver, cache):
    code, out, _ = _run([], resolver, cache, stdin="Bangkok\nignored\n")
    assert code == 0
    assert out.startswith("Asia/Bangkok")


def test_interactive_stdin_is_not_read(resolver, cache):
    code, _, err = _run([], resolver, cache, stdin=TTYInput("Bangkok\n"))
    assert code == 1
    assert "Enter a city name" in err


def test_plain_not_found_goes_to_stderr(resolver, cache):
    code, out, err = _run(["Nowhereville"], resolver, cache)
    assert code == 1
    assert out == ""
    assert err == "Error: City not found: no results found for: Nowhereville\n"


def test_plain_empty_query(resolver, cache):
    code, out, err = _run(["   "], resolver, cache)
    assert code == 1
    assert err.startswith("Error: Enter a city name")


def test_alfred_failure_goes_to_stdout(resolver, cache):
    code, out, err = _run(["Nowhereville"], resolver, cache, output_format="alfred")
    assert code == 1
    assert err == ""
    item = json.loads(out)["items"][0]
    assert item["title"] == "City not found"
    assert item["valid"] is False


def test_alfred_success(resolver, cache):
    code, out, _ = _run(["Bangkok"], resolver, cache, output_format="alfred")
    assert code == 0
    assert json.loads(out)["items"][0]["variables"]["timezone"] == "Asia/Bangkok"


def test_unexpected_error_is_internal(cache):
    class Exploding(SimulatorGeocoder):
        def geocode(self, city):
            raise RuntimeError("socket closed")

    resolver = Resolver(ResolverConfig(
        cache=cache,
        geocoder=Exploding(),
        timezones=SimulatorTimezoneProvider(),
        formatter=ZoneInfoFormatter(),
    ))
    code, _, err = _run(["Bangkok"], resolver, cache)
    assert code == 1
    assert err == "Error: Internal error: socket closed\n"


def test_zone_prints_time_without_lookup(resolver, cache, geocoder):
    code, out, err = _run(["--zone", "America/New_York"], resolver, cache)
    assert code == 0
    assert out == "America/New_York - Thu, May 1, 10:30 PM\n"
    assert geocoder.calls == []
    assert len(cache) == 0


def test_zone_read_from_pipe(resolver, cache):
    code, out, _ = _run(["--zone"], resolver, cache, stdin="Asia/Bangkok\n")
    assert code == 0
    assert out == "Asia/Bangkok - Fri, May 2, 9:30 AM\n"


def test_zone_alfred_subtitle(resolver, cache):
    code, out, _ = _run(["--zone", "America/New_York"], resolver, cache, output_format="alfred")
    assert code == 0
    item = json.loads(out)["items"][0]
    assert item["subtitle"] == "Current time in New York (EDT)"
    assert item["variables"]["timezone"] == "America/New_York"


def test_zone_unknown(resolver, cache):
    code, out, err = _run(["--zone", "Mars/Tharsis"], resolver, cache)
    assert code == 1
    assert out == ""
    assert err == "Error: Timezone not found: Invalid timezone: Mars/Tharsis\n"


def test_alfred_resolve_names_abbreviation(resolver, cache):
    _, out, _ = _run(["Bangkok"], resolver, cache, output_format="alfred")
    assert json.loads(out)["items"][0]["subtitle"] == "Current time in Bangkok (+07)"


def test_clear_cache(resolver, cache):
    cache.set("bangkok", "Asia/Bangkok")
    code, out, _ = _run(["--clear-cache"], resolver, cache)
    assert code == 0
    assert "Cache cleared" in out
    assert len(cache) == 0


def test_clear_cache_failure(resolver):
    class StuckCache(InMemoryTimezoneCache):
        def clear(self):
            raise CacheWriteError("read-only file system")

    code, _, err = _run(["--clear-cache"], resolver, StuckCache())
    assert code == 1
    assert "read-only file system" in err


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------


@pytest.fixture
def cache_path(tmp_path, monkeypatch):
    path = tmp_path / "geotz_cache.json"
    monkeypatch.setenv("TIMEIN_CACHE_PATH", str(path))
    monkeypatch.delenv("TIMEIN_FORMAT", raising=False)
    monkeypatch.delenv("TIMEIN_CACHE_SIZE", raising=False)
    monkeypatch.delenv("TIMEIN_CACHE_TTL", raising=False)
    return path


def test_main_answers_from_cache_without_network(cache_path, capsys):
    JsonFileTimezoneCache(cache_path).set("bangkok", "Asia/Bangkok")

    code = cli.main(["--timezone-only", "Bangkok"])

    assert code == 0
    assert capsys.readouterr().out == "Asia/Bangkok\n"


def test_main_formats_cached_time(cache_path, capsys):
    JsonFileTimezoneCache(cache_path).set("bangkok", "Asia/Bangkok")

    assert cli.main(["Bangkok"]) == 0
    assert capsys.readouterr().out.startswith("Asia/Bangkok - ")


def test_main_clear_cache_removes_file(cache_path):
    JsonFileTimezoneCache(cache_path).set("bangkok", "Asia/Bangkok")
    assert cli.main(["--clear-cache"]) == 0
    assert not cache_path.exists()


def test_main_usage_error(cache_path, capsys):
    assert cli.main(["--bogus"]) == 2
    assert "Usage" in capsys.readouterr().err


def test_main_unknown_format(cache_path, capsys):
    assert cli.main(["--format=xml", "Bangkok"]) == 2
    assert "xml" in capsys.readouterr().err


def test_main_bad_env(cache_path, monkeypatch, capsys):
    monkeypatch.setenv("TIMEIN_CACHE_SIZE", "zero")
    assert cli.main(["Bangkok"]) == 2
    assert "TIMEIN_CACHE_SIZE" in capsys.readouterr().err


def test_main_zone_needs_no_cache_or_network(cache_path, capsys):
    assert cli.main(["--zone", "UTC"]) == 0
    assert capsys.readouterr().out.startswith("UTC - ")
    assert not cache_path.exists()


def test_open_cache_uses_configured_lifetime(cache_path, monkeypatch):
    monkeypatch.setenv("TIMEIN_CACHE_TTL", "3600")
    cache = cli.open_cache(Settings.from_env())
    assert cache.ttl == timedelta(hours=1)
    assert cache.path == cache_path
