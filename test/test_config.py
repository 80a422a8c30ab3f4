import yaml

from config import config as cfg
from config import config_manager


def test_load_config_merges_yaml_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"messages": {"location_name": "Crozet"}, "feed": {"radius": 12}}))

    config = config_manager.load_config(path, environ={})

    assert config["messages"]["location_name"] == "Crozet"
    assert config["messages"]["max_chars"] == 280
    assert config["feed"]["radius"] == 12
    assert config["feed"]["latitude"] == cfg.DEFAULT_CONFIG["feed"]["latitude"]


def test_missing_file_is_created_from_defaults(tmp_path):
    path = tmp_path / "nested" / "config.yaml"

    config = cfg.load_config(path)

    assert path.exists()
    assert config == cfg.DEFAULT_CONFIG
    assert config is not cfg.DEFAULT_CONFIG


def test_environment_overrides_are_cast_to_default_types(tmp_path):
    environ = {
        "FEED__LATITUDE": "40.5",
        "FEED__RADIUS": "8",
        "SOCIAL_NETWORKS__TELEGRAM": "yes",
        "FILTERS__IGNORED_CARRIERS": "ual, dal,,",
        "MESSAGES__LOCATION_NAME": "Richmond",
        "FEED__LONGITUDE": "west",
    }

    config = config_manager.load_config(tmp_path / "config.yaml", environ=environ)

    assert config["feed"]["latitude"] == 40.5
    assert config["feed"]["radius"] == 8
    assert config["social_networks"]["telegram"] is True
    assert config["filters"]["ignored_carriers"] == ["UAL", "DAL"]
    assert config["messages"]["location_name"] == "Richmond"
    assert config["feed"]["longitude"] == cfg.DEFAULT_CONFIG["feed"]["longitude"]


def test_poll_interval_and_cooldown_are_clamped(tmp_path):
    environ = {"EXECUTION__POLL_INTERVAL_SECONDS": "0", "SIGHTINGS__COOLDOWN_MINUTES": "-3"}

    config = config_manager.load_config(tmp_path / "config.yaml", environ=environ)

    assert config["execution"]["poll_interval_seconds"] == 1
    assert config["sightings"]["cooldown_minutes"] == 1
    assert config_manager.cooldown_ms(config) == 60_000


def test_secrets_come_from_environment(tmp_path):
    environ = {"PLANESPOTTERS_API_KEY": " secret ", "HEALTHCHECKS_PING_URL": "https://hc-ping.com/uuid"}

    config = config_manager.load_config(tmp_path / "config.yaml", environ=environ)

    assert config["photos"]["planespotters_api_key"] == "secret"
    assert config["healthchecks"]["ping_url"] == "https://hc-ping.com/uuid"


def test_default_cooldown_is_ten_minutes(tmp_path):
    config = config_manager.load_config(tmp_path / "config.yaml", environ={})

    assert config_manager.cooldown_ms(config) == 600_000


def test_get_config_reads_dotted_keys():
    config = cfg.merge_config(cfg.DEFAULT_CONFIG, {"photos": {"enabled": False}})

    assert cfg.get_config("photos.enabled", config) is False
    assert cfg.get_config("photos.missing", config) is None
    assert cfg.get_config("feed.radius", config) == 5
