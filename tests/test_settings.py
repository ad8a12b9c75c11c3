import json
from pathlib import Path

import pytest

from invoice_maker.core.services import settings


def test_missing_file_gives_defaults(tmp_path):
    data = settings.load_settings(tmp_path / "missing.json")
    assert data == settings.DEFAULT_SETTINGS
    assert data is not settings.DEFAULT_SETTINGS


def test_partial_file_is_merged_over_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"invoice": {"currency": "USD"}, "export": {"scale": 3}}), encoding="utf-8")

    data = settings.load_settings(path)

    assert data["invoice"]["currency"] == "USD"
    assert data["invoice"]["tax_rate"] == 11
    assert data["export"]["scale"] == 3
    assert data["export"]["tolerance_mm"] == 2.0


def test_unreadable_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{broken", encoding="utf-8")
    assert settings.load_settings(path) == settings.DEFAULT_SETTINGS


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    data = settings.load_settings(path)
    data["sender"]["name"] = "Toko Baru"

    settings.save_settings(data, path)

    assert settings.load_settings(path)["sender"]["name"] == "Toko Baru"


def test_store_and_export_paths(tmp_path):
    data = settings.load_settings(tmp_path / "none.json")
    assert settings.store_path(data).name == "invoices.json"
    assert settings.export_dir(data) == Path.home()

    data["store"]["path"] = str(tmp_path / "records.json")
    data["export"]["output_dir"] = str(tmp_path)
    assert settings.store_path(data) == tmp_path / "records.json"
    assert settings.export_dir(data) == tmp_path


def test_bundled_settings_file_matches_defaults():
    assert settings.load_settings() == settings.DEFAULT_SETTINGS


def test_export_options_defaults():
    assert settings.export_options(settings.DEFAULT_SETTINGS) == {"scale": 2.0, "jpeg_quality": 95, "tolerance_mm": 2.0}
    assert settings.export_options({}) == {"scale": 2.0, "jpeg_quality": 95, "tolerance_mm": 2.0}


@pytest.mark.parametrize("value", [None, "", "wide"])
def test_export_tolerance_falls_back_when_unset_or_invalid(value):
    options = settings.export_options({"export": {"tolerance_mm": value}})
    assert options["tolerance_mm"] == 2.0


def test_export_options_keep_explicit_values():
    options = settings.export_options({"export": {"tolerance_mm": 0.5, "scale": 3, "jpeg_quality": "80"}})
    assert options == {"scale": 3.0, "jpeg_quality": 80, "tolerance_mm": 0.5}


def test_explicit_zero_tolerance_is_kept():
    assert settings.export_options({"export": {"tolerance_mm": 0}})["tolerance_mm"] == 0
