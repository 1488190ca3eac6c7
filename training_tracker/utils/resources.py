import re
from dataclasses import dataclass
from typing import List, Optional

YOUTUBE_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&\n?#]+)"),
    re.compile(r"^([a-zA-Z0-9_-]{11})$"),
)

def youtube_video_id(url: str) -> Optional[str]:
    """Extract the video id from watch, short, embed URLs or a bare 11-character id."""
    if not url:
        return None
    for pattern in YOUTUBE_PATTERNS:
        match = pattern.search(url.strip())
        if match:
            return match.group(1)
    return None

def youtube_embed_url(url: str) -> Optional[str]:
    video_id = youtube_video_id(url)
    if not video_id:
        return None
    return f"https://www.youtube.com/embed/{video_id}"

@dataclass
class ResourceLine:
    text: str
    heading: bool = False

def render_resource_lines(content: Optional[str]) -> List[ResourceLine]:
    """Read-mode rendering of resource notes: '#' lines become headings (first '#' stripped)."""
    if not content:
        return []
    lines = []
    for line in content.split("\n"):
        if line.startswith("#"):
            lines.append(ResourceLine(text=line.replace("#", "", 1), heading=True))
        else:
            lines.append(ResourceLine(text=line))
    return lines

def safe_filename(value: str, default: str = "untitled") -> str:
    cleaned = re.sub(r"[^\w\s-]", "", value or "").strip().replace(" ", "_")
    return cleaned or default
