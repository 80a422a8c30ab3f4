from typing import Dict, Any, List, Optional
from urllib.parse import quote
import aiohttp
from loguru import logger
from core.interfaces import Notifier
from core.models import NotificationMessage


def sanitize_urls(values: Any) -> List[str]:
    """Trimmed, deduplicated target URLs in their original order."""
    if isinstance(values, str):
        values = values.split(",")
    if not isinstance(values, (list, tuple)):
        return []
    seen = []
    for value in values:
        if isinstance(value, str) and value.strip() and value.strip() not in seen:
            seen.append(value.strip())
    return seen


class AppriseProvider(Notifier):
    """Relays notifications through an Apprise API server (stateless ``urls`` or a stored config key)."""

    def _endpoint(self, api_url: str, config_key: Optional[str]) -> str:
        base = api_url.rstrip("/")
        if config_key:
            return f"{base}/{quote(config_key, safe='')}"
        return base

    async def send(self, message: NotificationMessage, config: Dict[str, Any]) -> bool:
        if not config['social_networks'].get('apprise', False):
            return False

        settings = config.get('apprise', {}) or {}
        api_url = (settings.get('api_url') or '').strip()
        if not api_url:
            logger.warning("Apprise API URL is not configured; skipping notification")
            return False

        targets = sanitize_urls(settings.get('urls', []))
        config_key = (settings.get('config_key') or '').strip() or None
        if not targets and not config_key:
            logger.error("No Apprise destination configured (urls or config_key).")
            return False

        endpoint = self._endpoint(api_url, config_key)
        title = message.title or ''
        attachments = [attachment.url for attachment in message.attachments if attachment.url]

        try:
            async with aiohttp.ClientSession() as session:
                if attachments:
                    form = aiohttp.FormData()
                    if not config_key:
                        form.add_field('urls', ','.join(targets))
                    if title:
                        form.add_field('title', title)
                    form.add_field('body', message.body)
                    for url in attachments:
                        form.add_field('attachment', url)
                    request = session.post(endpoint, data=form)
                else:
                    payload: Dict[str, Any] = {'title': title, 'body': message.body}
                    if not config_key:
                        payload['urls'] = targets
                    request = session.post(endpoint, json=payload)

                async with request as response:
                    if response.status >= 400:
                        text = await response.text()
                        logger.error(f"Apprise notification failed with status {response.status}: {text}")
                        return False

            logger.success(f"Apprise notification sent: {title or message.body.splitlines()[0]}")
            return True
        except Exception as e:
            logger.error(f"Error sending Apprise notification: {e}")
            return False
