import argparse
import json
from pathlib import Path

from . import __version__
from .env import ConfigError, Settings, load_env
from .client import ConfluenceClient
from .logger import LOG_LEVELS, get_logger
from .probe import probe
from .schema import validate_course
from .search import UserSearch
from . import handlers


def _settings(args: argparse.Namespace) -> Settings:
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        raise SystemExit(str(e))
    if getattr(args, "base_url", None):
        settings.base_url = args.base_url
    if getattr(args, "timeout", None) is not None:
        settings.timeout = args.timeout
    if getattr(args, "limit", None) is not None:
        settings.limit = args.limit
    return settings


def _client(settings: Settings) -> ConfluenceClient:
    try:
        return ConfluenceClient.from_settings(settings)
    except ConfigError as e:
        raise SystemExit(str(e))


def _read_json(path_str: str) -> dict:
    input_path = Path(path_str)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def cmd_search(args: argparse.Namespace) -> None:
    settings = _settings(args)
    searcher = UserSearch(_client(settings), limit=settings.limit)
    outcome = searcher.search_detailed(args.query)

    if args.json:
        data = outcome.to_dict() if args.trace else [u.to_dict() for u in outcome.users]
        print(json.dumps(data, indent=2))
        return

    if args.trace:
        for attempt in outcome.attempts:
            detail = f" ({attempt.error})" if attempt.error else ""
            print(f"[{attempt.status.value}] {attempt.label}{detail}")
    if not outcome.users:
        print("No users found.")
        return
    print(f"Found {len(outcome.users)} users via {outcome.winner}:\n")
    for user in outcome.users:
        print(f"ID: {user.id}")
        print(f"  Name: {user.name}")
        if user.username:
            print(f"  Username: {user.username}")
        if user.email:
            print(f"  Email: {user.email}")


def cmd_probe(args: argparse.Namespace) -> None:
    settings = _settings(args)
    report = probe(_client(settings))
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return
    for name, check in report.endpoint_tests.items():
        status = check.status if check.status is not None else "-"
        line = f"{name}: {status} ok={check.ok}"
        if check.error:
            line += f" error={check.error}"
        print(line)
    if report.cql_test is not None:
        cql = report.cql_test
        print(f"cql: {cql.status} ok={cql.ok} results={cql.result_count}")
    print(f"Success: {report.success}")
    print(f"Recommendation: {report.recommendation}")


def cmd_whoami(args: argparse.Namespace) -> None:
    settings = _settings(args)
    result = handlers.get_current_account_id(_client(settings))
    if "error" in result:
        raise SystemExit(result["error"])
    print(result["accountId"])


def cmd_add_course(args: argparse.Namespace) -> None:
    course = _read_json(args.input)
    store_path = Path(args.store or _settings(args).store)
    outcome = handlers.add_course(course, store_path)
    if not outcome["success"]:
        raise SystemExit(f"Course not added: {outcome['error']}")
    print(f"Added: {course.get('title')}")


def cmd_list_courses(args: argparse.Namespace) -> None:
    store_path = Path(args.store or _settings(args).store)
    courses = handlers.get_courses(store_path)
    if not courses:
        print("No courses in store.")
        return
    print(f"Found {len(courses)} courses in {store_path}:\n")
    for course in courses:
        print(f"Title: {course.get('title')}")
        print(f"  Product: {course.get('product')}")
        print(f"  Level: {course.get('level')}")
        print(f"  URL: {course.get('atlassianUrl')}")
        print()


def cmd_validate_course(args: argparse.Namespace) -> None:
    errors = validate_course(_read_json(args.input))
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def _add_connection_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--base-url", help="Confluence site URL (or set CONFLUENCE_BASE_URL)")
    p.add_argument("--timeout", type=float, help="Per-request timeout in seconds (default 10)")


def main(argv=None):
    # Load .env if present (CONFLUENCE_BASE_URL, CONFLUENCE_API_TOKEN, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="usersearch", description="Confluence user search and course catalog CLI")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="DEBUG, INFO, WARNING, ERROR, CRITICAL (or set USERSEARCH_LOG_LEVEL)",
    )

    subparsers = parser.add_subparsers(dest="command")
    srch = subparsers.add_parser("search", help="Search users, falling back across query strategies")
    srch.add_argument("--query", required=True, help="Free-text name, username or email fragment")
    srch.add_argument("--limit", type=int, help="Max results per strategy (default 20)")
    srch.add_argument("--json", action="store_true", help="Print JSON instead of text")
    srch.add_argument("--trace", action="store_true", help="Show every strategy attempt")
    _add_connection_args(srch)
    srch.set_defaults(func=cmd_search)

    prb = subparsers.add_parser("probe", help="Check which Confluence endpoints respond")
    prb.add_argument("--json", action="store_true", help="Print the report as JSON")
    _add_connection_args(prb)
    prb.set_defaults(func=cmd_probe)

    who = subparsers.add_parser("whoami", help="Print the account id the credentials belong to")
    _add_connection_args(who)
    who.set_defaults(func=cmd_whoami)

    addc = subparsers.add_parser("add-course", help="Validate a course JSON and append it to the store")
    addc.add_argument("--input", required=True, help="Path to course JSON input")
    addc.add_argument("--store", help="Path to JSON store (default: data/courses.json)")
    addc.set_defaults(func=cmd_add_course)

    lst = subparsers.add_parser("list-courses", help="List all stored courses")
    lst.add_argument("--store", help="Path to JSON store (default: data/courses.json)")
    lst.set_defaults(func=cmd_list_courses)

    val = subparsers.add_parser("validate-course", help="Validate a course JSON without storing it")
    val.add_argument("--input", required=True, help="Path to course JSON input")
    val.set_defaults(func=cmd_validate_course)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    try:
        level = args.log_level or Settings.from_env().log_level
    except ConfigError as e:
        raise SystemExit(str(e))
    get_logger(level=level)

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
