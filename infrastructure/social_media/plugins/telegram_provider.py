import os
import asyncio
from typing import Dict, Any, Optional
from loguru import logger
from telegram.ext import ApplicationBuilder
import telegram.error
from core.interfaces import Notifier
from core.models import NotificationMessage

MAX_CAPTION_CHARS = 1024


class TelegramProvider(Notifier):
    def __init__(self):
        self._application = None

    def _get_application(self):
        if self._application:
            return self._application

        token = os.getenv('TELEGRAM_BOT_TOKEN')
        if not token:
            logger.error("TELEGRAM_BOT_TOKEN not found in environment variables.")
            return None

        try:
            self._application = ApplicationBuilder().token(token).build()
            return self._application
        except Exception as e:
            logger.error(f"Failed to initialize Telegram bot: {e}")
            return None

    def _reply_markup(self, message: NotificationMessage) -> Optional[Dict[str, Any]]:
        attachment = message.attachments[0] if message.attachments else None
        if not attachment or not attachment.page_url:
            return None
        return {
            'inline_keyboard': [[{
                'text': 'Photo gallery',
                'url': attachment.page_url
            }]]
        }

    async def send(self, message: NotificationMessage, config: Dict[str, Any]) -> bool:
        if not config['social_networks'].get('telegram', False):
            return False

        chat_id = (config.get('telegram', {}) or {}).get('chat_id')
        if not chat_id:
            logger.error("Telegram chat_id not configured.")
            return False

        app = self._get_application()
        if not app:
            return False

        text = message.body
        photo_url = message.attachments[0].url if message.attachments else None
        reply_markup = self._reply_markup(message)
        retries = int((config.get('telegram', {}) or {}).get('retries', 3))

        # A rejected photo falls back to text without spending an attempt.
        attempt = 0
        while attempt < retries:
            try:
                if photo_url:
                    await app.bot.send_photo(
                        chat_id=chat_id,
                        photo=photo_url,
                        caption=text[:MAX_CAPTION_CHARS],
                        reply_markup=reply_markup
                    )
                else:
                    await app.bot.send_message(
                        chat_id=chat_id,
                        text=text,
                        disable_web_page_preview=True,
                        reply_markup=reply_markup
                    )
                logger.success(f"Telegram sent: {message.title or text.splitlines()[0]}")
                return True
            except telegram.error.TimedOut:
                attempt += 1
                if attempt < retries:
                    await asyncio.sleep(2 ** (attempt - 1))
                    continue
                logger.error("Telegram timeout")
            except telegram.error.BadRequest as e:
                if photo_url:
                    logger.warning(f"Telegram rejected the photo ({e}), sending text only")
                    photo_url = None
                    continue
                logger.error(f"Telegram failed: {e}")
                return False
            except Exception as e:
                logger.error(f"Telegram failed: {e}")
                return False
        return False
