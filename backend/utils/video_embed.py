import re

VIDEO_TYPES = ["vimeo", "loom", "youtube", "custom"]

_VIMEO_PATTERNS = [re.compile(r"vimeo\.com/(\d+)"), re.compile(r"vimeo\.com/video/(\d+)")]
_LOOM_PATTERN = re.compile(r"loom\.com/share/([a-zA-Z0-9]+)")
_YOUTUBE_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]+)"),
    re.compile(r"youtube\.com/embed/([a-zA-Z0-9_-]+)"),
]


def _first_match(patterns, url):
    for pattern in patterns:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def detect_video_type(url: str) -> str:
    if not url:
        return "custom"
    if "vimeo.com" in url:
        return "vimeo"
    if "loom.com" in url:
        return "loom"
    if "youtube.com" in url or "youtu.be" in url:
        return "youtube"
    return "custom"


def get_video_embed_url(url: str, video_type: str) -> str:
    """Player URL for a lesson video. Unrecognised URLs are returned unchanged."""
    if not url:
        return ""

    if video_type == "vimeo":
        vimeo_id = _first_match(_VIMEO_PATTERNS, url)
        return f"https://player.vimeo.com/video/{vimeo_id}?title=0&byline=0&portrait=0" if vimeo_id else url
    if video_type == "loom":
        match = _LOOM_PATTERN.search(url)
        return f"https://www.loom.com/embed/{match.group(1)}" if match else url
    if video_type == "youtube":
        youtube_id = _first_match(_YOUTUBE_PATTERNS, url)
        return f"https://www.youtube.com/embed/{youtube_id}" if youtube_id else url
    return url


def get_video_embed_url_with_autoplay(url: str, video_type: str) -> str:
    embed_url = get_video_embed_url(url, video_type)
    if not embed_url:
        return ""
    # Loom and custom players ignore the autoplay parameter
    if video_type in ("vimeo", "youtube"):
        separator = "&" if "?" in embed_url else "?"
        return f"{embed_url}{separator}autoplay=1"
    return embed_url


def format_duration(seconds) -> str:
    if not seconds:
        return "0m"
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
