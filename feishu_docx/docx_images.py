"""
Image resolution for inserted docx blocks.

The convert endpoint turns ``![alt](url)`` into empty image blocks. After
insertion, each external image is downloaded, uploaded as docx media against
its block and the block is patched to point at the uploaded token.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from auth.feishu_client import FeishuClient
from feishu_docx.docx_blocks import BLOCK_TYPE_IMAGE
from feishu_docx.docx_service import patch_block, upload_docx_image
from feishu_docx.markdown_images import extract_image_urls, image_filename

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = httpx.Timeout(30.0, connect=10.0)

Downloader = Callable[[str], Awaitable[bytes]]


@dataclass
class ImagePair:
    """An image URL and the placeholder block sharing its position"""
    index: int
    url: str
    block_id: str


@dataclass
class ImageOutcome:
    index: int
    url: str
    block_id: str
    success: bool
    file_token: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ImageResolutionReport:
    outcomes: List[ImageOutcome] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def processed(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> List[ImageOutcome]:
        return [o for o in self.outcomes if not o.success]


def pair_images(urls: List[str], blocks: List[Dict[str, Any]]) -> List[ImagePair]:
    """
    Pair image URLs with image blocks by position.

    The Nth URL in the markdown is assumed to be the Nth image block produced
    for it. Extra URLs or extra blocks beyond the shorter list are ignored. If
    the convert endpoint drops or reorders images the pairs will be wrong.
    """
    image_blocks = [b for b in blocks if b.get("block_type") == BLOCK_TYPE_IMAGE]
    return [
        ImagePair(index=i, url=url, block_id=block.get("block_id"))
        for i, (url, block) in enumerate(zip(urls, image_blocks))
    ]


async def download_image(url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> bytes:
    async with httpx.AsyncClient(timeout=DOWNLOAD_TIMEOUT, follow_redirects=True, transport=transport) as http:
        response = await http.get(url)
    if response.is_error:
        raise RuntimeError(f"Failed to download image: {response.status_code} {response.reason_phrase}")
    return response.content


async def resolve_images(
    client: FeishuClient,
    document_id: str,
    markdown: str,
    inserted_blocks: List[Dict[str, Any]],
    downloader: Downloader = download_image,
) -> ImageResolutionReport:
    """
    Back-fill the image blocks just inserted for markdown with uploaded media.

    Pairs are processed one at a time. A failure while downloading, uploading
    or patching one pair is logged and recorded; the remaining pairs are still
    processed and pairs already patched stay patched.

    Args:
        client: Feishu client
        document_id: Document the blocks were inserted into
        markdown: The markdown the blocks were converted from
        inserted_blocks: Blocks returned by the create-children call
        downloader: Coroutine returning the bytes behind an image URL

    Returns:
        ImageResolutionReport with one outcome per attempted pair
    """
    report = ImageResolutionReport()

    urls = extract_image_urls(markdown)
    if not urls:
        return report

    pairs = pair_images(urls, inserted_blocks)
    logger.info(f"[resolve_images] {len(urls)} image URL(s), {len(pairs)} paired with image blocks in {document_id}")

    for pair in pairs:
        try:
            content = await downloader(pair.url)
            file_name = image_filename(pair.url, pair.index)
            file_token = await upload_docx_image(client, pair.block_id, content, file_name)
            await patch_block(client, document_id, pair.block_id, {"replace_image": {"token": file_token}})
        except Exception as e:
            logger.warning(f"[resolve_images] Failed to process image {pair.url}: {e}")
            report.outcomes.append(ImageOutcome(
                index=pair.index, url=pair.url, block_id=pair.block_id, success=False, error=str(e)
            ))
            continue

        report.outcomes.append(ImageOutcome(
            index=pair.index, url=pair.url, block_id=pair.block_id, success=True, file_token=file_token
        ))

    logger.info(f"[resolve_images] Processed {report.processed}/{report.attempted} image(s)")
    return report
