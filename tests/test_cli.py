from __future__ import annotations

from pathlib import Path

import pytest
from conftest import skill_md, write_tree

from autoskills.cli import main
from autoskills.config import AutoskillsConfig


def test_help_without_command(config: AutoskillsConfig, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([], config) == 0
    assert main(["help"], config) == 0
    out = capsys.readouterr().out
    assert "autoskills init my-skill" in out
    assert "AGENTS_SKILLS_DIR" in out


def test_usage_error_exits_one(config: AutoskillsConfig, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["bogus"], config) == 1
    assert main(["init"], config) == 1
    assert "error:" in capsys.readouterr().err


def test_init_then_add(
    config: AutoskillsConfig, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    work = tmp_path / "work"
    assert main(["init", "my-skill", "--path", str(work)], config) == 0
    skill_dir = work / "my-skill"
    assert (skill_dir / "SKILL.md").read_text(encoding="utf-8").startswith(
        "---\nname: my-skill\n"
    )
    assert sorted(p.name for p in skill_dir.iterdir() if p.is_dir()) == [
        "assets",
        "references",
        "scripts",
    ]
    assert f"autoskills add {skill_dir} -y" in capsys.readouterr().out

    assert main(["add", str(skill_dir), "-y"], config) == 0
    out = capsys.readouterr().out
    assert "Created symlink:" in out
    assert (config.skills_dir / "my-skill" / "SKILL.md").is_file()
    assert (config.agents_skills_dir / "my-skill").is_symlink()


def test_init_rejects_existing_and_invalid(
    config: AutoskillsConfig, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["init", "my-skill"], config) == 0
    assert (config.skills_dir / "my-skill" / "SKILL.md").is_file()

    assert main(["init", "my-skill"], config) == 1
    assert main(["init", "My Skill"], config) == 1
    err = capsys.readouterr().err
    assert "already exists" in err
    assert 'Invalid skill name "My Skill"' in err


def test_add_conflict_needs_yes(
    config: AutoskillsConfig, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    write_tree(tmp_path / "src", {"lint/SKILL.md": skill_md("lint", "New lint")})
    write_tree(config.skills_dir, {"lint/SKILL.md": skill_md("lint", "Old lint")})

    assert main(["add", str(tmp_path / "src" / "lint")], config) == 1
    assert "Use -y to overwrite" in capsys.readouterr().err
    assert "Old lint" in (config.skills_dir / "lint" / "SKILL.md").read_text(encoding="utf-8")

    assert main(["add", str(tmp_path / "src" / "lint"), "--yes"], config) == 0
    assert "New lint" in (config.skills_dir / "lint" / "SKILL.md").read_text(encoding="utf-8")


def test_add_uses_declared_name(config: AutoskillsConfig, tmp_path: Path) -> None:
    write_tree(tmp_path, {"folder/SKILL.md": skill_md("declared-name")})
    assert main(["add", str(tmp_path / "folder")], config) == 0
    assert (config.skills_dir / "declared-name" / "SKILL.md").is_file()


def test_add_missing_skill_md(config: AutoskillsConfig, tmp_path: Path, capsys) -> None:
    (tmp_path / "empty").mkdir()
    assert main(["add", str(tmp_path / "empty")], config) == 1
    assert "SKILL.md not found" in capsys.readouterr().err


def test_list(config: AutoskillsConfig, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["list"], config) == 0
    assert "No personal skills found." in capsys.readouterr().out

    write_tree(
        config.skills_dir,
        {
            "alpha/SKILL.md": skill_md("alpha", "x" * 80),
            "beta/SKILL.md": "---\nname: beta\n---\n# Beta\n",
        },
    )
    assert main(["list"], config) == 0
    out = capsys.readouterr().out
    assert "Personal Skills (2):" in out
    assert "    " + "x" * 60 + "...\n" in out
    assert "(no description)" in out
    assert f"Skills directory: {config.skills_dir}" in out


def test_filesystem_failure_exits_one(blocked_config, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["init", "fresh"], blocked_config) == 1
    assert "Error: Failed to create skill template" in capsys.readouterr().err
