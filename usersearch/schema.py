import re
from typing import Any, Dict, List

REQUIRED_STR_FIELDS = ["title", "description", "atlassianUrl", "product"]
OPTIONAL_STR_FIELDS = [
    "level",
    "imageBase64",
    "imageUrl",
]

LEVELS = ("Beginner", "Intermediate", "Advanced")
DEFAULT_LEVEL = "Beginner"
PRODUCTS = ("Jira", "Confluence", "Marketplace apps", "Other")

COURSE_URL_PATTERNS = [
    re.compile(r"^https://community\.atlassian\.com/learning/collection/topic/[a-zA-Z0-9-]+$"),
    re.compile(r"^https://community\.atlassian\.com/learning/course/[a-zA-Z0-9-]+$"),
    re.compile(r"^https://university\.atlassian\.com/student/page/[a-zA-Z0-9-]+$"),
]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _valid_course_url(v: str) -> bool:
    return any(p.match(v) for p in COURSE_URL_PATTERNS)


def validate_course(data: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    if not isinstance(data, dict):
        return ["Course must be a JSON object"]

    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    for f in OPTIONAL_STR_FIELDS:
        if f in data and data[f] is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    if _is_non_empty_str(data.get("atlassianUrl")) and not _valid_course_url(data["atlassianUrl"]):
        errors.append(
            "Field 'atlassianUrl' must be an Atlassian Community course/collection "
            "or Atlassian University page URL"
        )

    level = data.get("level") or DEFAULT_LEVEL
    if isinstance(level, str) and level not in LEVELS:
        errors.append(f"Field 'level' must be one of: {', '.join(LEVELS)}")

    if _is_non_empty_str(data.get("product")) and data["product"] not in PRODUCTS:
        errors.append(f"Field 'product' must be one of: {', '.join(PRODUCTS)}")

    return errors
