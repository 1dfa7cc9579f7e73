"""
Tests for make_transforms
"""

from pathlib import Path

import pytest

from casecommand import load_transform
from make_transforms import (
    DEFAULT_INI,
    main,
    render_script,
    script_name,
    write_ini,
    write_scripts,
)

TRANSFORMS = Path(__file__).resolve().parent.parent / "transforms"


class TestMakeTransforms:

    def test_writes_one_script_per_style(self, tmp_path):
        paths = write_scripts(tmp_path / "out")
        assert [p.name for p in paths] == ["camel_case.py", "kebab_case.py", "dot_case.py"]
        assert all(p.read_text(encoding="utf-8").startswith("#!/usr/bin/env python3")
                   for p in paths)

    @pytest.mark.parametrize("style, text, expected", [
        ("camel", "SCREEN_NAME", "screenName"),
        ("kebab", "Hello World", "hello-world"),
        ("dot", " multiple Words_here!", "multiple.words.here"),
    ])
    def test_generated_scripts_convert(self, tmp_path, style, text, expected):
        write_scripts(tmp_path)
        fn, _, desc = load_transform(str(tmp_path / script_name(style)))
        assert fn(text) == expected
        assert desc.startswith("Convert text to")

    def test_unknown_style(self):
        with pytest.raises(ValueError):
            render_script("snake")

    @pytest.mark.parametrize("style", ["camel", "kebab", "dot"])
    def test_shipped_scripts_are_current(self, style):
        shipped = (TRANSFORMS / script_name(style)).read_text(encoding="utf-8")
        assert shipped == render_script(style)

    def test_shipped_ini_is_current(self):
        assert (TRANSFORMS / "transforms.ini").read_text(encoding="utf-8") == DEFAULT_INI

    def test_write_ini_keeps_existing(self, tmp_path):
        assert write_ini(tmp_path) == tmp_path / "transforms.ini"
        (tmp_path / "transforms.ini").write_text("[chain:mine]\n", encoding="utf-8")
        assert write_ini(tmp_path) is None
        assert (tmp_path / "transforms.ini").read_text(encoding="utf-8") == "[chain:mine]\n"

    def test_main_fills_working_directory(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        assert main() == 0
        folder = tmp_path / "transforms"
        assert sorted(p.name for p in folder.iterdir()) == [
            "camel_case.py", "dot_case.py", "kebab_case.py", "transforms.ini",
        ]
        assert "4 files written" in capsys.readouterr().out
