"""CQL expression builders for the user and content search endpoints."""

USER_SEARCH_PATH = "/wiki/rest/api/search/user"
CONTENT_SEARCH_PATH = "/wiki/rest/api/search"

MATCH_ALL_FULLNAME = 'user.fullname~"*"'
KNOWN_USERS = 'user.type="known"'


def quote_term(query: str) -> str:
    """
    Wrap a query in a CQL string literal with a trailing wildcard.

    Backslashes and double quotes are escaped so user input cannot close
    the literal early.
    """
    escaped = query.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}*"'


def fullname_match(query: str) -> str:
    return f"user.fullname~{quote_term(query)}"


def user_match(query: str) -> str:
    return f"user~{quote_term(query)}"


def accountid_match(query: str) -> str:
    return f"user.accountid~{quote_term(query)}"


def content_user_match(query: str) -> str:
    return f"type=user AND text~{quote_term(query)}"


def looks_like_identifier(query: str) -> bool:
    # email-ish or dotted account names
    return "@" in query or "." in query
