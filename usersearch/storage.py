import json
from pathlib import Path
from typing import Dict, Any, List

from .schema import validate_course, DEFAULT_LEVEL


def load_store(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {"courses": []}
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
            if not content:
                return {"courses": []}
            store = json.loads(content)
    except (json.JSONDecodeError, IOError):
        return {"courses": []}
    if not isinstance(store, dict) or not isinstance(store.get("courses"), list):
        return {"courses": []}
    return store


def save_store(path: Path, store: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(store, f, indent=2, ensure_ascii=False)


def get_courses(path: Path) -> List[Dict[str, Any]]:
    return load_store(path)["courses"]


def add_course(path: Path, course: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and append a course. Never raises; failures come back as data."""
    errors = validate_course(course)
    if errors:
        return {"success": False, "error": "; ".join(errors)}

    record = dict(course)
    record.setdefault("level", DEFAULT_LEVEL)
    # the UI stores the preview as imageUrl
    if "imageBase64" in record and "imageUrl" not in record:
        record["imageUrl"] = record["imageBase64"]

    store = load_store(path)
    store["courses"].append(record)
    try:
        save_store(path, store)
    except OSError as e:
        return {"success": False, "error": str(e)}
    return {"success": True}
