"""
Command-line entry point: one query in, one result (or failure) out.

Usage:
    timein [--format=plain|alfred] [--timezone-only] <city or landmark>
    timein [--format=plain|alfred] --zone <IANA timezone>
    echo "Bangkok" | timein
    timein --timezone-only Kyoto | timein --zone
    timein --clear-cache

Exit status is 0 on success and 1 when the query could not be resolved.
Settings come from the environment, see timein.config.
"""

import logging
import sys
from dataclasses import dataclass
from typing import TextIO

from timein.adapters.json_file_cache import JsonFileTimezoneCache
from timein.adapters.nominatim_geocoder import NominatimGeocoder
from timein.adapters.timezonefinder_provider import TimezoneFinderProvider
from timein.adapters.zoneinfo_formatter import ZoneInfoFormatter
from timein.config import Settings
from timein.domain.timezone_cache import CacheWriteError, TimezoneCache
from timein.errors import ResolveError
from timein.presentation.factory import create_presenter
from timein.presentation.ports import failure_from_error
from timein.resolver import Resolver, ResolverConfig

log = logging.getLogger(__name__)

USAGE = (
    "Usage: timein [--format=plain|alfred] [--timezone-only | --zone] [--clear-cache] "
    "<city or landmark | IANA timezone>"
)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


@dataclass
class Options:
    query: str | None = None
    output_format: str | None = None
    timezone_only: bool = False
    zone: bool = False  # the query is an IANA timezone id, not a place
    clear_cache: bool = False


def parse_args(argv: list[str]) -> Options:
    """Tiny flag parser; raises ValueError on unknown flags."""
    opts = Options()
    words: list[str] = []
    args = iter(argv)
    for arg in args:
        if arg.startswith("--format="):
            opts.output_format = arg.split("=", 1)[1]
        elif arg == "--format":
            opts.output_format = next(args, None)
            if opts.output_format is None:
                raise ValueError("--format needs a value")
        elif arg == "--timezone-only":
            opts.timezone_only = True
        elif arg == "--zone":
            opts.zone = True
        elif arg == "--clear-cache":
            opts.clear_cache = True
        elif arg == "--":
            words.extend(args)
        elif arg.startswith("--"):
            raise ValueError(f"unknown option {arg}")
        else:
            words.append(arg)
    if opts.zone and opts.timezone_only:
        raise ValueError("--zone and --timezone-only cannot be combined")
    if words:
        opts.query = " ".join(words)
    return opts


def open_cache(settings: Settings) -> JsonFileTimezoneCache:
    return JsonFileTimezoneCache(
        settings.cache_path, settings.cache_size, ttl=settings.cache_lifetime
    )


def build_resolver(settings: Settings, cache: TimezoneCache | None = None) -> Resolver:
    if cache is None:
        cache = open_cache(settings)
    config = ResolverConfig(
        cache=cache,
        geocoder=NominatimGeocoder(
            base_url=settings.nominatim_url,
            user_agent=settings.nominatim_user_agent,
            timeout=settings.nominatim_timeout,
        ),
        timezones=TimezoneFinderProvider(),
        formatter=ZoneInfoFormatter(),
    )
    return Resolver(config)


def run(
    opts: Options,
    resolver: Resolver,
    cache: TimezoneCache,
    output_format: str,
    stdin: TextIO,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    presenter = create_presenter(output_format)
    plain = output_format == "plain"

    if opts.clear_cache:
        try:
            cache.clear()
        except CacheWriteError as exc:
            log.error("could not clear cache: %s", exc)
            print(f"Error: could not clear cache: {exc}", file=stderr)
            return EXIT_FAILED
        print("Cache cleared.", file=stdout)
        return EXIT_OK

    query = opts.query
    if query is None and not stdin.isatty():
        query = stdin.readline()

    try:
        if opts.zone:
            result = resolver.time_in_zone(query or "")
        elif opts.timezone_only:
            result = resolver.resolve_timezone(query or "")
        else:
            result = resolver.resolve(query or "")
    except ResolveError as exc:
        log.info("could not resolve %r: %s: %s", query, exc.kind, exc.detail)
        return _fail(presenter.render_failure(failure_from_error(exc)), plain, stdout, stderr)
    except Exception as exc:
        log.error("unexpected error resolving %r: %s", query, exc)
        return _fail(presenter.render_failure(failure_from_error(exc)), plain, stdout, stderr)

    stdout.write(presenter.render_success(result, timezone_only=opts.timezone_only))
    return EXIT_OK


def _fail(text: str, plain: bool, stdout: TextIO, stderr: TextIO) -> int:
    # Alfred only reads stdout; terminals expect errors on stderr.
    (stderr if plain else stdout).write(text)
    return EXIT_FAILED


def main(argv: list[str] | None = None) -> int:
    try:
        opts = parse_args(sys.argv[1:] if argv is None else argv)
        settings = Settings.from_env()
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return EXIT_USAGE

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    output_format = opts.output_format or settings.output_format
    if output_format not in ("plain", "alfred"):
        print(f"ERROR: unknown output format {output_format!r}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return EXIT_USAGE

    cache = open_cache(settings)
    resolver = build_resolver(settings, cache=cache)
    return run(opts, resolver, cache, output_format, sys.stdin, sys.stdout, sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
