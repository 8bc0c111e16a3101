from norquay_status.config import load_config


def test_defaults_come_from_packaged_yaml():
    config = load_config(env={})

    assert config.source.conditions_url == "https://banffnorquay.com/winter/conditions/"
    assert config.cache.runs_max_age == 60
    assert config.cache.conditions_max_age == 600
    assert config.scheduler.cron == "*/20 * * * *"
    assert [lift.letter for lift in config.lifts] == ["A", "B", "C", "D", "E", "F", "G"]
    assert config.lifts[0].badge_id == "north-american-liftletter"


def test_yaml_override_file_is_merged(tmp_path):
    override = tmp_path / "local.yaml"
    override.write_text("cache:\n  runs_max_age: 30\nmap:\n  note_max_length: 120\n")

    config = load_config(env={"NORQUAY_CONFIG_PATH": str(override)})

    assert config.cache.runs_max_age == 30
    assert config.cache.conditions_max_age == 600
    assert config.map.note_max_length == 120
    assert config.map.run_map_path == "public/runMap.json"


def test_env_overrides():
    config = load_config(
        env={
            "NORQUAY_SCHEDULER_CRON": "*/5 * * * *",
            "NORQUAY_SCHEDULER_ENABLED": "off",
            "NORQUAY_LOG_LEVEL": "debug",
            "NORQUAY_LOG_JSON": "false",
            "NORQUAY_SOURCE_URL": "https://example.test/conditions",
            "NORQUAY_RUN_MAP_PATH": "/srv/runMap.json",
            "NORQUAY_SVG_PATH": "",
        }
    )

    assert config.scheduler.cron == "*/5 * * * *"
    assert config.scheduler.enabled is False
    assert config.logging.level == "debug"
    assert config.logging.json is False
    assert config.source.conditions_url == "https://example.test/conditions"
    assert config.map.run_map_path == "/srv/runMap.json"
    assert config.map.svg_path is None


def test_unrecognised_bool_keeps_yaml_value():
    config = load_config(env={"NORQUAY_SCHEDULER_ENABLED": "maybe"})

    assert config.scheduler.enabled is True
