import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core import settings
from core.logs import get_logger, read_log
from storage.config import AppConfig, load_config, save_config, update_config


def test_linux_data_dir_with_xdg():
    env = {"XDG_DATA_HOME": "/tmp/xdg"}
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="linux",
        env=env,
        home=Path("/home/test"),
    )
    assert result == Path("/tmp/xdg") / settings.APP_NAME


def test_linux_data_dir_default_home():
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="linux",
        env={},
        home=Path("/home/test"),
    )
    assert result == Path("/home/test/.local/share") / settings.APP_NAME


def test_macos_data_dir():
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="darwin",
        env={"APPDATA": "/ignored"},
        home=Path("/Users/test"),
    )
    expected = Path("/Users/test/Library/Application Support") / settings.APP_NAME
    assert result == expected


def test_windows_data_dir_appdata():
    env = {"APPDATA": "C:/Users/test/AppData/Roaming"}
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="win32",
        env=env,
        home=Path("C:/Users/test"),
    )
    expected = Path(env["APPDATA"]) / settings.APP_NAME
    assert result == expected


def test_data_dir_override_wins():
    env = {"SMARTTASK_DATA_DIR": "/srv/smarttask", "XDG_DATA_HOME": "/tmp/xdg"}
    result = settings.get_default_data_dir(
        settings.APP_NAME,
        platform="linux",
        env=env,
        home=Path("/home/test"),
    )
    assert result == Path("/srv/smarttask")


def test_runtime_paths_inside_data_dir():
    assert settings.DB_PATH.parent == settings.DATA_DIR
    assert settings.CONFIG_PATH.parent == settings.DATA_DIR
    assert settings.LOG_PATH.parent == settings.LOG_DIR
    assert settings.LOG_DIR.parent == settings.DATA_DIR


def test_config_defaults_when_missing(tmp_path):
    cfg = load_config(tmp_path / "config.json")
    assert cfg == AppConfig()
    assert cfg.week_start_day == 0
    assert cfg.calendar_mode == "month"


def test_config_round_trip(tmp_path):
    path = tmp_path / "nested" / "config.json"
    save_config(AppConfig(week_start_day=6, timezone="Europe/Berlin", calendar_mode="week"), path)
    assert json.loads(path.read_text(encoding="utf-8"))["week_start_day"] == 6
    assert load_config(path) == AppConfig(week_start_day=6, timezone="Europe/Berlin", calendar_mode="week")
    assert not path.with_suffix(".tmp").exists()


def test_config_corrupt_file_falls_back(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_config(path) == AppConfig()


def test_config_invalid_values_are_normalized(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"week_start_day": 9, "timezone": "Nowhere/Land", "calendar_mode": "Year"}),
        encoding="utf-8",
    )
    assert load_config(path) == AppConfig()


def test_update_config_keeps_other_fields(tmp_path):
    path = tmp_path / "config.json"
    save_config(AppConfig(week_start_day=6, timezone="UTC", calendar_mode="day"), path)
    cfg = update_config(path, timezone="gmt", unknown="ignored")
    assert cfg == AppConfig(week_start_day=6, timezone="UTC", calendar_mode="day")
    assert load_config(path) == cfg


def test_read_log_tail(tmp_path):
    path = tmp_path / "app.log"
    assert read_log(path=path) == "No log entries yet."
    path.write_text("".join(f"line {i}\n" for i in range(10)), encoding="utf-8")
    assert read_log(3, path=path) == "line 7\nline 8\nline 9"


def test_child_loggers_share_root():
    log = get_logger("tests")
    assert log.name == "smarttask.tests"
    assert log.parent is get_logger()
