import os
import importlib.util
import inspect
from typing import List
from loguru import logger
from core.interfaces import Notifier


class PluginLoader:
    def __init__(self, plugin_dir: str):
        self.plugin_dir = plugin_dir

    def load_plugins(self) -> List[Notifier]:
        plugins = []
        if not os.path.exists(self.plugin_dir):
            logger.warning(f"Plugin directory {self.plugin_dir} does not exist.")
            return plugins

        logger.info(f"Scanning for notifier plugins in {self.plugin_dir}")

        for filename in sorted(os.listdir(self.plugin_dir)):
            if not filename.endswith(".py") or filename.startswith("__"):
                continue

            plugin_path = os.path.join(self.plugin_dir, filename)
            module_name = f"notifier_plugins.{filename[:-3]}"

            try:
                spec = importlib.util.spec_from_file_location(module_name, plugin_path)
                if not spec or not spec.loader:
                    continue
                module = importlib.util.module_from_spec(spec)
                spec.loader.exec_module(module)
            except Exception as e:
                logger.error(f"Failed to load plugin from {filename}: {e}")
                continue

            # Only classes defined in the plugin file, not ones it imports.
            for name, obj in inspect.getmembers(module, inspect.isclass):
                if not issubclass(obj, Notifier) or obj is Notifier or obj.__module__ != module_name:
                    continue
                try:
                    plugins.append(obj())
                    logger.info(f"Loaded notifier plugin: {name} from {filename}")
                except Exception as e:
                    logger.error(f"Failed to instantiate plugin {name}: {e}")

        return plugins
