import copy
import yaml
from pathlib import Path

CONFIG_PATH = Path(__file__).parent / 'config.yaml'

# Default configuration
DEFAULT_CONFIG = {
    'logging': {
        'log_file': 'logs/overhead_spotter.log',
        'warning_log_file': 'logs/overhead_spotter_warning.log',
        'log_level': 'DEBUG',
        'log_rotation': '10 MB'
    },
    'feed': {
        'base_url': 'https://api.airplanes.live/v2',
        'latitude': 38.0375,
        'longitude': -78.4863,
        'radius': 5,
        'request_timeout_seconds': 10,
        'user_agent': 'overhead-spotter/1.0'
    },
    'execution': {
        'poll_interval_seconds': 5
    },
    'sightings': {
        'cooldown_minutes': 10,
        'store': 'json',
        'data_file': 'data/db.json',
        'table': 'sightings'
    },
    'filters': {
        'max_altitude_ft': 25000,
        'ignored_carriers': []
    },
    'messages': {
        'location_name': 'Charlottesville',
        'details_link_base': 'https://globe.airplanes.live/?icao=',
        'show_details_link': True,
        'max_chars': 280
    },
    'photos': {
        'enabled': True,
        'planespotters_api_key': '',
        'request_timeout_seconds': 10
    },
    'social_networks': {
        'bluesky': False,
        'telegram': False,
        'apprise': False
    },
    'bluesky': {
        'service': 'https://bsky.social'
    },
    'telegram': {
        'chat_id': '',
        'retries': 3
    },
    'apprise': {
        'api_url': '',
        'urls': [],
        'config_key': ''
    },
    'healthchecks': {
        'ping_url': ''
    }
}


def merge_config(base, override):
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    if not isinstance(override, dict):
        return merged
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(config_path=None):
    """Load configuration from YAML file, filling gaps from DEFAULT_CONFIG"""
    path = Path(config_path) if config_path else CONFIG_PATH
    if not path.exists():
        save_config(DEFAULT_CONFIG, path)
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(path, 'r') as f:
        return merge_config(DEFAULT_CONFIG, yaml.safe_load(f) or {})


def save_config(config, config_path=None):
    """Save configuration to YAML file"""
    path = Path(config_path) if config_path else CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.safe_dump(config, f, sort_keys=False)


def get_config(key, config=None):
    """Get a specific configuration value by dotted key"""
    current = config if config is not None else load_config()
    for k in key.split('.'):
        if not isinstance(current, dict) or k not in current:
            return None
        current = current[k]
    return current
