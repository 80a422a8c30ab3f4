import os
from loguru import logger
from config import config as cfg

# Secrets never live in config.yaml; they are read from the environment only.
SECRET_ENV_VARS = {
    'PLANESPOTTERS_API_KEY': ('photos', 'planespotters_api_key'),
    'HEALTHCHECKS_PING_URL': ('healthchecks', 'ping_url'),
}

MIN_POLL_INTERVAL_SECONDS = 1
MIN_COOLDOWN_MINUTES = 1

TRUE_VALUES = ['true', '1', 't', 'y', 'yes', 'on']


def _cast_env_value(env_var_name, env_value, original):
    """Cast an environment string to the type of the value it replaces."""
    if isinstance(original, bool):
        return env_value.strip().lower() in TRUE_VALUES
    if isinstance(original, int):
        try:
            return int(env_value)
        except ValueError:
            logger.warning(f"Could not cast env var {env_var_name}='{env_value}' to int. Using original value.")
            return original
    if isinstance(original, float):
        try:
            return float(env_value)
        except ValueError:
            logger.warning(f"Could not cast env var {env_var_name}='{env_value}' to float. Using original value.")
            return original
    if isinstance(original, list):
        return [item.strip() for item in env_value.split(',') if item.strip()]
    return env_value


def _override_with_env_vars(config_dict, parent_key="", environ=None):
    """
    Recursively overrides dictionary values with environment variables.
    Environment variables are named like SECTION__KEY, e.g. FEED__LATITUDE for config['feed']['latitude'].
    """
    environ = os.environ if environ is None else environ
    for key, value in config_dict.items():
        env_var_name = "__".join(part for part in [parent_key, key] if part).upper()

        if isinstance(value, dict):
            _override_with_env_vars(value, env_var_name, environ)
            continue

        env_value = environ.get(env_var_name)
        if env_value is None:
            continue
        config_dict[key] = _cast_env_value(env_var_name, env_value, value)
        logger.info(f"Config key '{env_var_name.lower().replace('__', '.')}' overridden by environment variable '{env_var_name}'.")


def _apply_secrets(config, environ):
    for env_var_name, (section, key) in SECRET_ENV_VARS.items():
        value = (environ.get(env_var_name) or '').strip()
        if value:
            config.setdefault(section, {})[key] = value


def _clamp(config):
    execution = config['execution']
    try:
        interval = float(execution.get('poll_interval_seconds', MIN_POLL_INTERVAL_SECONDS))
    except (TypeError, ValueError):
        interval = cfg.DEFAULT_CONFIG['execution']['poll_interval_seconds']
    execution['poll_interval_seconds'] = max(MIN_POLL_INTERVAL_SECONDS, interval)

    sightings = config['sightings']
    try:
        cooldown = float(sightings.get('cooldown_minutes', MIN_COOLDOWN_MINUTES))
    except (TypeError, ValueError):
        cooldown = cfg.DEFAULT_CONFIG['sightings']['cooldown_minutes']
    sightings['cooldown_minutes'] = max(MIN_COOLDOWN_MINUTES, cooldown)

    filters = config['filters']
    filters['ignored_carriers'] = [
        str(code).strip().upper()
        for code in (filters.get('ignored_carriers') or [])
        if str(code).strip()
    ]


def load_config(config_path=None, environ=None):
    """
    Load configuration from the YAML file, then override with environment variables.

    Args:
        config_path: Path to the YAML file. Defaults to config/config.yaml.
        environ: Mapping used instead of os.environ (tests).

    Returns:
        dict: The configuration dictionary.
    """
    environ = os.environ if environ is None else environ
    try:
        config = cfg.load_config(config_path)
        logger.info(f"Configuration loaded from '{config_path or cfg.CONFIG_PATH}'.")
    except Exception as e:
        logger.error(f"Could not load configuration file '{config_path or cfg.CONFIG_PATH}': {e}. Using defaults.")
        config = cfg.merge_config(cfg.DEFAULT_CONFIG, {})

    _override_with_env_vars(config, environ=environ)
    _apply_secrets(config, environ)
    _clamp(config)
    return config


def cooldown_ms(config) -> int:
    return int(config['sightings']['cooldown_minutes'] * 60 * 1000)
