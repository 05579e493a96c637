TAG_PREFIXES = [
    ("/api/v1/auth/", "Authentication"),
    ("/api/v1/users/", "Users"),
    ("/api/v1/lists/", "Lists"),
    ("/api/v1/focus/", "Focus"),
    ("/api/v1/activity/", "Activity"),
    ("/api/v1/templates/", "Templates"),
    ("/api/v1/ai/", "AI"),
    ("/api/v1/upload/", "Uploads"),
    ("/api/v1/export/", "Export"),
]


def _tag_for(path: str) -> str | None:
    if path.startswith("/api/v1/todos/"):
        # Comment and focus actions hang off a todo but keep their own tags.
        if "/comments" in path:
            return "Comments"
        if "/focus/" in path:
            return "Focus"
        return "Todos"
    for prefix, name in TAG_PREFIXES:
        if path.startswith(prefix):
            return name
    if path == "/api/v1/schema/":
        return "Meta"
    return None


def group_tags_by_path(result, generator, request, public):
    """Give every operation a single tag derived from its URL."""
    for path, operations in result.get("paths", {}).items():
        tag = _tag_for(path)
        if tag is None:
            continue
        for op in operations.values():
            op["tags"] = [tag]
    return result
