from pathlib import Path

import pytest

from triagekit.collectors.kape import build_collector_args
from triagekit.config import AcquisitionSettings, load_settings
from triagekit.core.errors import ConfigError


def test_defaults_without_file(tmp_path: Path) -> None:
    settings = load_settings(media_root=tmp_path)

    assert settings == AcquisitionSettings()
    assert settings.collector_filename == "kape.exe"
    assert settings.search_depth == 6
    assert settings.start_delay_seconds == 60
    assert settings.stealth is True


def test_media_root_settings_file_is_used(tmp_path: Path) -> None:
    (tmp_path / "triagekit.yaml").write_text(
        "search_depth: 3\ntarget_profile: KapeTriage\nrecord_format: jsonl\n",
        encoding="utf-8",
    )

    settings = load_settings(media_root=tmp_path)

    assert settings.search_depth == 3
    assert settings.target_profile == "KapeTriage"
    assert settings.record_format == "jsonl"


def test_empty_file_means_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("", encoding="utf-8")

    assert load_settings(path) == AcquisitionSettings()


def test_unknown_key_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("serch_depth: 3\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="serch_depth"):
        load_settings(path)


def test_non_mapping_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("- kape.exe\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as exc_info:
        load_settings(tmp_path / "absent.yaml")

    assert exc_info.value.error.code == "CONFIG_ERROR"


def test_collector_args_stealth() -> None:
    args = build_collector_args("C:", "E:\\CASE-20250101-1210-HOST1", "!SANS_Triage", "HOST1")

    assert args == [
        "--tsource", "C:",
        "--tdest", "E:\\CASE-20250101-1210-HOST1",
        "--target", "!SANS_Triage",
        "--vhdx", "HOST1",
        "--zv", "false",
    ]


def test_collector_args_with_gui() -> None:
    args = build_collector_args("C:", "E:\\out", "!SANS_Triage", "HOST1", stealth=False)

    assert args[-1] == "--gui"
