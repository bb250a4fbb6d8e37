"""
Markdown image reference extraction.
"""
import re
from typing import List
from urllib.parse import urlparse

IMAGE_PATTERN = re.compile(r"!\[[^\]]*\]\(([^)]+)\)")


def extract_image_urls(markdown: str) -> List[str]:
    """
    Collect http(s) image URLs from ``![alt](url)`` references.

    Order follows the source text and duplicates are kept, since the result is
    paired by position with the image blocks produced for the same markdown.
    Local paths and other schemes are dropped.
    """
    urls = []
    for match in IMAGE_PATTERN.finditer(markdown or ""):
        url = match.group(1).strip()
        if url.startswith("http://") or url.startswith("https://"):
            urls.append(url)
    return urls


def image_filename(url: str, index: int) -> str:
    """Last path segment of the URL, or image_<index>.png when the path has none."""
    name = urlparse(url).path.split("/")[-1]
    return name or f"image_{index}.png"
