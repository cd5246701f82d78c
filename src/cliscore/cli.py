"""Command-line entry point for cliscore."""

from __future__ import annotations

import argparse
import contextlib
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterator, Sequence

from cliscore import token_store
from cliscore.client import KeyscoreClient, KeyscoreError
from cliscore.config import (
    Config,
    ConfigError,
    config_file_exists,
    config_path,
    load_config,
    save_config,
    save_results,
)
from cliscore.detector import detect_types
from cliscore.logging import configure_logging
from cliscore.models import MAX_PAGE, CountRequest, PaginationParams, SearchRequest
from cliscore.presenter import (
    TYPE_MENU,
    choose_types,
    format_number,
    format_pagination_info,
    map_request_types,
    render_payload,
    to_pretty_json,
)
from cliscore.spinner import NO_SPINNER, SETUP_STYLES, STYLES, create_spinner


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Show debug logging.",
    )
    parser.add_argument(
        "--api-key",
        help="API key for authentication (overrides config and CLISCORE_API_KEY).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Minimal output, no spinner.",
    )


def _add_query_options(parser: argparse.ArgumentParser, verb: str) -> None:
    parser.add_argument("terms", nargs="+", help=f"Terms to {verb}.")
    parser.add_argument(
        "--types",
        help="Comma-separated types; skips type detection (e.g. login,password,url).",
    )
    parser.add_argument("--source", default="xkeyscore", help=f"Source to {verb} in.")
    parser.add_argument("--wildcard", action="store_true", help="Enable wildcard search.")
    parser.add_argument("--operator", choices=("AND", "LOGS"), help="Search operator.")
    save_group = parser.add_mutually_exclusive_group()
    save_group.add_argument(
        "--save", dest="save", action="store_true", default=None,
        help="Save results to file.",
    )
    save_group.add_argument(
        "--no-save", dest="save", action="store_false",
        help="Don't save results to file.",
    )
    parser.add_argument("--results-dir", help="Results directory (overrides config).")
    parser.add_argument(
        "--no-spinner",
        dest="spinner",
        action="store_false",
        help="Don't show the loading spinner.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cliscore",
        description="Command-line client for the keyscore search API.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=False, help="Show debug logging."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser(
        "search",
        help="Search for terms across different data types (with pagination support).",
    )
    _add_common_options(search)
    _add_query_options(search, "search")
    search.add_argument(
        "--page", type=int, help=f"Specific page number to retrieve (1-{MAX_PAGE})."
    )
    search.add_argument("--pages", help="Pages to retrieve (e.g. '1,2,3' or '1-5').")
    search.add_argument(
        "--page-size", type=int, help="Number of results per page (max: 10000)."
    )

    count = subparsers.add_parser("count", help="Count occurrences of terms.")
    _add_common_options(count)
    _add_query_options(count, "count")

    subparsers.add_parser("setup", help="Set up API key and endpoint.")
    subparsers.add_parser("config", help="Show current configuration.")

    machineinfo = subparsers.add_parser(
        "machineinfo", help="Get machine information from log files."
    )
    _add_common_options(machineinfo)
    machineinfo.add_argument("uuid", help="UUID of the log file.")

    download = subparsers.add_parser("download", help="Download log files.")
    _add_common_options(download)
    download.add_argument("uuid", help="UUID of the log file.")
    download.add_argument("--file", help="Specific file to extract from the archive.")
    download.add_argument("--output", help="Output file path.")

    credits = subparsers.add_parser("credits", help="Check your remaining credits.")
    _add_common_options(credits)

    subparsers.add_parser("spinner", help="Show available spinner styles.")

    return parser


def _prompt(text: str) -> str:
    try:
        return input(text).strip()
    except EOFError:
        return ""


def _is_yes(answer: str) -> bool:
    return answer.lower() in ("y", "yes")


def _confirm_detected(types: list[str]) -> bool:
    print(f"Detected types: {', '.join(types)}")
    answer = _prompt("Use detected types? (Y/n): ")
    return answer == "" or _is_yes(answer)


def _select_types() -> str:
    print("\nAvailable types:")
    for index, name in enumerate(TYPE_MENU, start=1):
        print(f"{index}. {name}")
    print()
    return _prompt("Select types (comma-separated numbers, e.g., '1,2,3' or 'all'): ")


def _resolve_types(args: argparse.Namespace) -> list[str]:
    if args.types:
        return [t.strip() for t in args.types.split(",") if t.strip()]
    return choose_types(detect_types(args.terms), _confirm_detected, _select_types)


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    changes: dict[str, Any] = {}
    if getattr(args, "api_key", None):
        changes["api_key"] = args.api_key
    if getattr(args, "save", None) is not None:
        changes["save_results"] = args.save
    if getattr(args, "results_dir", None):
        changes["results_dir"] = Path(args.results_dir)
    return replace(config, **changes) if changes else config


def _parse_pages(raw: str) -> list[int]:
    """Parse ``"1,2,3"`` or ``"1-5"`` (or a mix) into page numbers within 1..MAX_PAGE."""
    pages: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        start, sep, end = part.partition("-")
        if not sep:
            end = start
        start, end = start.strip(), end.strip()
        if not (start.isdecimal() and end.isdecimal()):
            continue
        for page in range(max(int(start), 1), min(int(end), MAX_PAGE) + 1):
            if page not in pages:
                pages.append(page)
    return pages


def _pagination_from_args(args: argparse.Namespace) -> PaginationParams | None:
    page = args.page if args.page and args.page > 0 else None
    pages = _parse_pages(args.pages) if args.pages else []
    page_size = args.page_size if args.page_size and args.page_size > 0 else None
    if page is None and not pages and page_size is None:
        return None
    return PaginationParams(page=page, pages=pages, page_size=page_size)


@contextlib.contextmanager
def _spinner(config: Config, message: str, enabled: bool = True) -> Iterator[None]:
    spinner = None
    if enabled:
        spinner = create_spinner(config.spinner_style, message, stream=sys.stderr)
    if spinner is None:
        yield
        return
    with spinner:
        yield


def _save(
    config: Config,
    data: Any,
    command: str,
    terms: Sequence[str],
    types: Sequence[str],
    quiet: bool,
) -> None:
    try:
        path = save_results(config, data, command, terms, types)
    except ConfigError as exc:
        if not quiet:
            print(f"Warning: Failed to save results: {exc}")
        return
    if path is not None and not quiet:
        print(f"Full response saved to: {path}")


def _client(config: Config) -> KeyscoreClient:
    return KeyscoreClient(config.base_url, config.api_key or None)


def _cmd_search(args: argparse.Namespace, config: Config) -> None:
    types = _resolve_types(args)
    config = _apply_overrides(config, args)
    request = SearchRequest(
        terms=args.terms,
        types=map_request_types(types),
        wildcard=args.wildcard,
        source=args.source,
        operator=args.operator,
    )
    pagination = _pagination_from_args(args)

    message = f"Searching for {', '.join(args.terms)} in {', '.join(types)}..."
    with _spinner(config, message, enabled=args.spinner and not args.quiet):
        response = _client(config).search(request, pagination)

    if response.is_paginated:
        if args.quiet:
            print(response.size)
        else:
            print("🔍 Search Results (Paginated)")
            print(format_pagination_info(response), end="")
            for page, results in response.pages.items():
                print(f"\n=== Page {page} ===")
                print(to_pretty_json(results))
    else:
        if args.quiet:
            print(len(response.results))
        else:
            print(f"Found {len(response.results)} results")
            print("Search Results:")
            print(to_pretty_json(response.results))

    _save(config, response.to_json(), "search", args.terms, types, args.quiet)


def _cmd_count(args: argparse.Namespace, config: Config) -> None:
    types = _resolve_types(args)
    config = _apply_overrides(config, args)
    request = CountRequest(
        terms=args.terms,
        types=map_request_types(types),
        wildcard=args.wildcard,
        source=args.source,
        operator=args.operator,
    )

    message = f"Counting {', '.join(args.terms)} in {', '.join(types)}..."
    with _spinner(config, message, enabled=args.spinner and not args.quiet):
        response = _client(config).count(request)

    if args.quiet:
        print(response.total_count)
    else:
        print(f"Count Results: {format_number(response.total_count)}")
        for name, value in response.counts.items():
            if isinstance(value, (dict, list)):
                print(f"  {name}:")
                print(to_pretty_json(value))
            else:
                print(f"  {name}: {format_number(value)}")

    counts = {
        "total_count": response.total_count,
        "counts": response.counts,
        "took": response.took,
    }
    _save(config, counts, "count", args.terms, types, args.quiet)


def _cmd_machineinfo(args: argparse.Namespace, config: Config) -> None:
    config = _apply_overrides(config, args)
    message = f"Retrieving machine info for UUID: {args.uuid}"
    with _spinner(config, message, enabled=not args.quiet):
        payload = _client(config).get_machine_info(args.uuid)

    if not args.quiet:
        print("Machine Information:")
        print(render_payload(payload))
    _save(config, payload.to_json(), "machineinfo", [args.uuid], ["log"], args.quiet)


def _cmd_download(args: argparse.Namespace, config: Config) -> None:
    config = _apply_overrides(config, args)
    if args.file:
        message = f"Downloading {args.file} from UUID: {args.uuid}"
    else:
        message = f"Downloading file for UUID: {args.uuid}"
    with _spinner(config, message, enabled=not args.quiet):
        path = _client(config).download_file(args.uuid, args.file, args.output)
    print(f"File downloaded successfully: {path}")


def _cmd_credits(args: argparse.Namespace, config: Config) -> None:
    config = _apply_overrides(config, args)
    if not config.api_key:
        raise ConfigError(
            "API key is required. Set CLISCORE_API_KEY environment variable or use --api-key flag"
        )
    response = _client(config).get_credits(config.api_key)
    if args.quiet:
        print(response.credits)
        return
    if response.message:
        print(response.message)
    print(f"Credits remaining: {format_number(response.credits)}")


def _cmd_config(args: argparse.Namespace, config: Config) -> None:
    print("Current configuration:")
    print(f"Base URL: {config.base_url}")
    print(f"API key: {'********' if config.api_key else 'Not set'}")
    print(f"Save results: {str(config.save_results).lower()}")
    if config.save_results:
        print(f"Results directory: {config.results_dir}")
    print(f"Spinner style: {config.spinner_style}")
    if config_file_exists():
        print(f"Config file: {config_path()}")
    else:
        print("Config file: Not found")


def _cmd_setup(args: argparse.Namespace, config: Config) -> None:
    print("🔧 Setting up cliscore configuration...")

    base_url = _prompt(f"Enter API base URL (default: {config.base_url}): ") or config.base_url

    if config.api_key:
        api_key = _prompt("Enter API key (press Enter to keep current): ") or config.api_key
    else:
        api_key = _prompt("Enter API key: ")
    if not api_key:
        raise ConfigError("API key is required")

    print("Validating API key...", end="", flush=True)
    try:
        KeyscoreClient(base_url).validate_api_key(api_key)
    except KeyscoreError as exc:
        print()
        raise KeyscoreError(
            f"API key validation failed: {exc}\nPlease check your API key and try again."
        ) from exc
    print(" ✅ Valid")

    answer = _prompt("Save results to files? (y/N): ")
    save_results_enabled = config.save_results if answer == "" else _is_yes(answer)

    results_dir = config.results_dir
    if save_results_enabled:
        results_dir = Path(
            _prompt(f"Enter results directory (default: {config.results_dir}): ")
            or config.results_dir
        )

    print("\nAvailable spinner styles:")
    for index, name in enumerate(SETUP_STYLES, start=1):
        description = STYLES[name].description if name in STYLES else "No spinner"
        print(f"{index}. {name} ({description.lower()})")
    choice = _prompt(
        f"Select spinner style (1-{len(SETUP_STYLES)}, default: {config.spinner_style}): "
    )
    spinner_style = config.spinner_style
    if choice:
        if choice.isdecimal() and 1 <= int(choice) <= len(SETUP_STYLES):
            spinner_style = SETUP_STYLES[int(choice) - 1]
        else:
            print(f"Invalid choice, using default: {config.spinner_style}")

    use_keychain = False
    if token_store.is_available():
        use_keychain = _is_yes(_prompt("Store API key in the OS keychain? (y/N): "))

    new_config = replace(
        config,
        base_url=base_url,
        api_key=api_key,
        results_dir=results_dir,
        save_results=save_results_enabled,
        spinner_style=spinner_style,
    )
    save_config(new_config, store_key_in_keychain=use_keychain)

    print("✅ Configuration saved successfully!")
    print(f"📍 Base URL: {base_url}")
    print("🔑 API key: ********")
    print(f"💾 Save results: {str(save_results_enabled).lower()}")
    if save_results_enabled:
        print(f"📁 Results directory: {results_dir}")
    print(f"🎨 Spinner style: {spinner_style}")


def _cmd_spinner(args: argparse.Namespace, config: Config) -> None:
    print("Available spinner styles:")
    print()
    for name, style in STYLES.items():
        print(f"  {name:<10} - {style.description} ({''.join(style.frames[:8])})")
    print(f"  {NO_SPINNER:<10} - No spinner")
    print()
    print("Usage:")
    print("  cliscore setup  - Configure spinner style")
    print("  or set CLISCORE_SPINNER_STYLE environment variable")


_COMMANDS = {
    "search": _cmd_search,
    "count": _cmd_count,
    "setup": _cmd_setup,
    "config": _cmd_config,
    "machineinfo": _cmd_machineinfo,
    "download": _cmd_download,
    "credits": _cmd_credits,
    "spinner": _cmd_spinner,
}


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cliscore commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))
    config = load_config()

    try:
        _COMMANDS[args.command](args, config)
    except (KeyscoreError, ConfigError) as exc:
        parser.exit(1, f"Error: {exc}\n")
    except KeyboardInterrupt:
        parser.exit(130, "\nInterrupted\n")


if __name__ == "__main__":
    main(sys.argv[1:])
