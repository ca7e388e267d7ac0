import re
from urllib.parse import urlparse

HASHTAG_PATTERN = re.compile(r"#[a-zA-Z0-9_]+")

INSTAGRAM_PROFILE_PATTERN = re.compile(r"instagram\.com/(?!p/)([A-Za-z0-9._]+)", re.IGNORECASE)

# Path segments that are Instagram routes, not usernames
INSTAGRAM_RESERVED = {"p", "reel", "reels", "explore", "stories", "accounts", "tv"}

YOUTUBE_HANDLE_PATTERN = re.compile(r"youtube\.com/@([A-Za-z0-9._-]+)", re.IGNORECASE)

ISO_DURATION_PATTERN = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def normalize_topic_name(name: str) -> str:
    """Normalize a topic label: trimmed, lowercase, leading '#' removed."""
    return name.strip().lstrip("#").strip().lower()


def extract_hashtags(text: str | None) -> list[str]:
    """
    Extract unique hashtags from free text, in first-seen order.

    "#AI tips #ai #Growth_Hacks" -> ["ai", "growth_hacks"]
    """
    if not text:
        return []
    seen: list[str] = []
    for match in HASHTAG_PATTERN.findall(text):
        name = normalize_topic_name(match)
        if name and name not in seen:
            seen.append(name)
    return seen


def extract_instagram_username(url: str) -> str | None:
    """Extract a lowercased Instagram username from a profile URL."""
    match = INSTAGRAM_PROFILE_PATTERN.search(url or "")
    if not match:
        return None
    username = match.group(1).rstrip(".").lower()
    if not username or username in INSTAGRAM_RESERVED:
        return None
    return username


def extract_youtube_handle(url: str) -> str | None:
    """Extract a YouTube @handle (without the @) from a channel URL."""
    match = YOUTUBE_HANDLE_PATTERN.search(url or "")
    return match.group(1).lower() if match else None


def clean_handle(handle: str) -> str:
    """
    Reduce user input to a bare handle.

    Accepts "@name", "name" or a full profile URL on either platform.
    """
    handle = handle.strip()
    if "://" in handle or handle.startswith("www."):
        username = extract_instagram_username(handle) or extract_youtube_handle(handle)
        if username:
            return username
        path = urlparse(handle if "://" in handle else f"https://{handle}").path
        handle = path.strip("/").split("/")[0] if path.strip("/") else handle
    return handle.lstrip("@").strip()


def parse_iso_duration(value: str | None) -> int | None:
    """Parse an ISO 8601 duration (PT#H#M#S) into seconds."""
    if not value:
        return None
    match = ISO_DURATION_PATTERN.fullmatch(value)
    if not match:
        return None
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def to_int(value: object, default: int = 0) -> int:
    """Coerce a count from an API payload (often a string) to int."""
    if value is None or value == "":
        return default
    try:
        return int(float(str(value)))
    except ValueError:
        return default
