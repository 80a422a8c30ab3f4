from pathlib import Path
from typing import List, Dict, Any, Optional
from loguru import logger
from core.interfaces import Notifier
from core.models import NotificationMessage
from infrastructure.social_media.plugin_loader import PluginLoader

DEFAULT_PLUGIN_DIR = Path(__file__).resolve().parent.parent / "infrastructure" / "social_media" / "plugins"


class NotificationService:
    def __init__(self, providers: Optional[List[Notifier]] = None, plugin_dir: Optional[str] = None):
        if providers is None:
            providers = PluginLoader(str(plugin_dir or DEFAULT_PLUGIN_DIR)).load_plugins()
        self.providers = providers
        logger.info(f"NotificationService initialized with {len(self.providers)} notifiers")

    async def notify(self, message: NotificationMessage, config: Dict[str, Any], title: Optional[str] = None) -> bool:
        """
        Sends the message to every loaded notifier, one after another.
        Returns True if at least one notifier delivered it.
        """
        if title and not message.title:
            message = message.model_copy(update={"title": title})

        delivered = False
        for provider in self.providers:
            provider_name = provider.__class__.__name__
            try:
                logger.debug(f"Notifying {provider_name}")
                if await provider.send(message, config):
                    delivered = True
            except Exception as e:
                logger.error(f"Error in notifier {provider_name}: {e}")
        return delivered
