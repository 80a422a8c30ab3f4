import asyncio
import io
import os
import re
from typing import Dict, Any, List, Optional
import aiohttp
from loguru import logger
from atproto import Client, models
from PIL import Image, UnidentifiedImageError
from core.interfaces import Notifier
from core.models import Attachment, NotificationMessage

MAX_IMAGE_SIZE_BYTES = 1000000  # 1MB
MAX_POST_CHARS = 300
BLUESKY_PDS_URL = "https://bsky.social"
URL_PATTERN = re.compile(r"https?://[^\s]+")


def compress_image(data: bytes, max_size_bytes: int = MAX_IMAGE_SIZE_BYTES) -> Optional[bytes]:
    """Shrink image bytes until they fit within max_size_bytes, or None if they never do."""
    if len(data) <= max_size_bytes:
        return data

    try:
        with Image.open(io.BytesIO(data)) as img:
            img = img.convert("RGB")
            width, height = img.size
            if max(width, height) > 1080:
                scale = 1080 / max(width, height)
                img = img.resize((int(width * scale), int(height * scale)), Image.LANCZOS)

            quality = 85
            while quality >= 50:
                buffer = io.BytesIO()
                img.save(buffer, "JPEG", quality=quality, optimize=True)
                if buffer.tell() <= max_size_bytes:
                    return buffer.getvalue()
                quality -= 5
    except (UnidentifiedImageError, OSError) as e:
        logger.error(f"Failed to compress image for Bluesky: {e}")
    return None


def build_link_facets(text: str) -> List[models.AppBskyRichtextFacet.Main]:
    """Link facets for every URL in the text. Bluesky indexes facets by UTF-8 byte offset."""
    facets = []
    for match in URL_PATTERN.finditer(text):
        uri = match.group(0).rstrip(".,)")
        byte_start = len(text[: match.start()].encode("utf-8"))
        byte_end = byte_start + len(uri.encode("utf-8"))
        facets.append(
            models.AppBskyRichtextFacet.Main(
                features=[models.AppBskyRichtextFacet.Link(uri=uri)],
                index=models.AppBskyRichtextFacet.ByteSlice(byteStart=byte_start, byteEnd=byte_end),
            )
        )
    return facets


class BlueskyProvider(Notifier):
    def __init__(self):
        self._client: Optional[Client] = None

    def _get_client(self, config: Dict[str, Any]) -> Optional[Client]:
        if self._client:
            return self._client

        handle = os.getenv("BLUESKY_HANDLE")
        password = os.getenv("BLUESKY_APP_PASSWORD")
        if not handle or not password:
            logger.error("Bluesky credentials not configured.")
            return None

        service = (config.get("bluesky", {}) or {}).get("service") or BLUESKY_PDS_URL
        client = Client(base_url=service)
        client.login(handle, password)
        self._client = client
        return client

    async def _download_image(self, url: str) -> Optional[bytes]:
        timeout = aiohttp.ClientTimeout(total=30)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url) as response:
                if response.status != 200:
                    logger.warning(f"Failed to download image for Bluesky: HTTP {response.status}")
                    return None
                return await response.read()

    async def _build_embed(self, client: Client, attachment: Optional[Attachment]):
        if attachment is None:
            return None

        image_bytes = None
        try:
            image_bytes = await self._download_image(attachment.url)
        except Exception as e:
            logger.warning(f"Bluesky image download failed: {e}")

        if image_bytes:
            compressed = await asyncio.to_thread(compress_image, image_bytes)
            if compressed:
                upload = await asyncio.to_thread(client.upload_blob, compressed)
                images = [models.AppBskyEmbedImages.Image(alt=attachment.alt_text or "", image=upload.blob)]
                return models.AppBskyEmbedImages.Main(images=images)
            logger.warning("Bluesky image compression failed, falling back to a link card")

        if attachment.page_url:
            return models.AppBskyEmbedExternal.Main(
                external=models.AppBskyEmbedExternal.External(
                    uri=attachment.page_url,
                    title="Aircraft photo",
                    description=attachment.alt_text or "Latest photo for this aircraft.",
                )
            )
        return None

    async def send(self, message: NotificationMessage, config: Dict[str, Any]) -> bool:
        if not config["social_networks"].get("bluesky", False):
            return False

        text = message.body.strip()
        if not text:
            logger.error("Refusing to post an empty Bluesky message")
            return False
        if len(text) > MAX_POST_CHARS:
            logger.error(f"Bluesky post exceeds {MAX_POST_CHARS} characters ({len(text)})")
            return False

        try:
            client = await asyncio.to_thread(self._get_client, config)
            if not client:
                return False

            attachment = message.attachments[0] if message.attachments else None
            embed = await self._build_embed(client, attachment)
            await asyncio.to_thread(client.send_post, text=text, facets=build_link_facets(text), embed=embed)

            logger.success(f"Bluesky post sent: {message.title or text.splitlines()[0]}")
            return True

        except Exception as e:
            logger.error(f"Failed to post to Bluesky: {e}")
            self._client = None
            return False
