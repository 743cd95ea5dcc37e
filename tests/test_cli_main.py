import struct

import pytest

pytest.importorskip("PyQt6.QtCore")

from ietools import cli_main  # noqa: E402


def test_parser_knows_all_commands():
    parser = cli_main.build_parser()
    args = parser.parse_args(["dialogs", "--d-folder", "dlg", "--string-id-to", "20"])
    assert args.command == "dialogs"
    assert args.d_folder == "dlg"
    assert args.string_id_to == 20
    assert args.string_id_from is None

    args = parser.parse_args(["-v", "items", "itm", "--from", "1", "--to", "2"])
    assert args.verbose
    assert (args.string_id_from, args.string_id_to) == (1, 2)
    assert args.out_txt == "Items.txt"


def test_no_command_prints_help(capsys):
    assert cli_main.main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_items_command(tmp_path):
    folder = tmp_path / "itm"
    folder.mkdir()
    data = bytearray(114)
    struct.pack_into('<i', data, 8, 1000)
    (folder / "A.itm").write_bytes(bytes(data))
    out_txt = tmp_path / "items.txt"

    code = cli_main.main(["items", str(folder), "--from", "1000", "--to", "2000", "--out-txt", str(out_txt)])

    assert code == 0
    assert out_txt.read_text(encoding="utf-8") == "1000\n\n"


def test_items_command_rejects_bad_range(tmp_path):
    code = cli_main.main(["items", str(tmp_path), "--from", "10", "--to", "5"])
    assert code == 1


def test_load_config_override(tmp_path):
    path = tmp_path / "override.json"
    path.write_text('{"dialog": {"string_id_from": 3}}', encoding="utf-8")
    assert cli_main.load_config_override(str(path)) == {"dialog": {"string_id_from": 3}}
    assert cli_main.load_config_override(str(tmp_path / "missing.json")) == {}


def test_dialog_config_layers_and_save(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.json"
    override.write_text('{"dialog": {"string_id_from": 3, "d_folder": "from_file"}}', encoding="utf-8")
    parser = cli_main.build_parser()
    args = parser.parse_args([
        "-v", "dialogs", "--config", str(override), "--d-folder", "dlg", "--save-config",
    ])

    config = cli_main.build_dialog_config(args)

    assert config.dialog_settings.d_folder == "dlg"
    assert config.dialog_settings.string_id_from == 3
    assert config.app_settings.verbose

    # the saved config.json is picked up by the next run
    args = parser.parse_args(["dialogs"])
    config = cli_main.build_dialog_config(args)
    assert config.dialog_settings.d_folder == "dlg"
    assert config.dialog_settings.string_id_from == 3
    assert config.app_settings.verbose


def test_dialog_config_without_save(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    args = cli_main.build_parser().parse_args(["dialogs", "--d-folder", "dlg"])
    config = cli_main.build_dialog_config(args)
    assert config.dialog_settings.d_folder == "dlg"
    assert not config.app_settings.verbose
    assert not (tmp_path / "config.json").exists()
