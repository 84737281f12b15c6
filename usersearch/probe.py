"""
Endpoint diagnostics.

Hits a handful of Confluence endpoints plus one match-everything user query
and records what each one answered. Nothing here feeds the live search
path; the report exists so operators can spot, for example, a search
endpoint that started answering 410 Gone.
"""

from typing import Optional

from .cql import USER_SEARCH_PATH, MATCH_ALL_FULLNAME, KNOWN_USERS
from .logger import StructuredLogger, get_logger
from .models import DiagnosticReport, EndpointCheck
from .normalize import extract_hits

ERROR_TEXT_LIMIT = 200

PROBE_ENDPOINTS = [
    ("content", "/wiki/rest/api/content", {"limit": 1}),
    ("space", "/wiki/rest/api/space", {"limit": 1}),
    ("user-current", "/wiki/rest/api/user/current", None),
    ("user-search-endpoint", USER_SEARCH_PATH, {"cql": KNOWN_USERS, "limit": 1}),
]


def check_endpoint(client, name: str, path: str, params=None) -> EndpointCheck:
    """Record status/ok/statusText for one endpoint; never raises."""
    try:
        response = client.get(path, params=params)
    except Exception as e:
        return EndpointCheck(name=name, error=str(e), type="exception")

    check = EndpointCheck(
        name=name,
        status=response.status,
        ok=response.ok,
        status_text=response.status_text,
    )
    # a 410 body is just boilerplate
    if not response.ok and response.status != 410:
        check.error = response.text[:ERROR_TEXT_LIMIT]
    return check


def check_cql(client) -> EndpointCheck:
    """Run the match-everything full-name query and count what comes back."""
    try:
        response = client.get(USER_SEARCH_PATH, params={"cql": MATCH_ALL_FULLNAME, "limit": 1})
    except Exception as e:
        return EndpointCheck(name="cql", error=str(e))

    check = EndpointCheck(name="cql", status=response.status, ok=response.ok)
    if response.ok:
        try:
            check.result_count = len(extract_hits(response.json()))
        except ValueError as e:
            check.error = f"Malformed JSON body: {e}"
    else:
        check.error = response.text[:ERROR_TEXT_LIMIT]
    return check


def probe(client, logger: Optional[StructuredLogger] = None) -> DiagnosticReport:
    logger = logger or get_logger()
    logger.info("Starting endpoint diagnostics")

    report = DiagnosticReport()
    for name, path, params in PROBE_ENDPOINTS:
        logger.debug(f"Testing {name} endpoint", path=path)
        check = check_endpoint(client, name, path, params)
        report.endpoint_tests[name] = check
        if not check.ok:
            logger.warning(f"Endpoint {name} not ok", status=check.status, error=check.error)

    report.cql_test = check_cql(client)
    logger.info(
        "Endpoint diagnostics complete",
        success=report.success,
        recommendation=report.recommendation,
    )
    return report
