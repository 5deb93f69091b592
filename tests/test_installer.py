from __future__ import annotations

from pathlib import Path

import pytest
from conftest import FakeRunner, skill_md, write_tree

from autoskills.errors import ExternalProcessError, InvalidInputError, SkillNotFoundError
from autoskills.installer import SkillInstaller
from autoskills.models import LinkStatus
from autoskills.repository import SkillRepository
from autoskills.resolver import resolve_skill_source


def test_install_from_plugin_subdirectory(repo: SkillRepository) -> None:
    runner = FakeRunner(
        repo_files={
            "README.md": "# y\n",
            "plugins/foo/skills/bar/SKILL.md": skill_md("bar", "Bar skill"),
            "plugins/foo/skills/bar/scripts/run.sh": "echo bar\n",
            "plugins/foo/skills/other/SKILL.md": skill_md("other"),
        }
    )
    installer = SkillInstaller(repo, run=runner)

    result = installer.install("x/y@bar")

    assert result.path == repo.skills_dir / "bar"
    assert (result.path / "scripts" / "run.sh").read_text(encoding="utf-8") == "echo bar\n"
    assert not (result.path / ".git").exists()
    assert result.link is LinkStatus.CREATED
    assert (repo.agents_skills_dir / "bar").is_symlink()

    clone = runner.calls[0]
    assert clone[1:4] == ["clone", "--depth=1", "https://github.com/x/y.git"]
    # scratch clone is discarded
    assert not runner.clone_destinations[0].exists()


def test_install_replaces_existing_skill(repo: SkillRepository) -> None:
    write_tree(repo.skills_dir, {"bar/SKILL.md": skill_md("bar", "Old"), "bar/stale.txt": "x"})
    runner = FakeRunner(repo_files={"skills/bar/SKILL.md": skill_md("bar", "New")})

    SkillInstaller(repo, run=runner).install("x/y@bar")

    skill = repo.get_skill("bar")
    assert skill is not None
    assert skill.meta.description == "New"
    assert not (repo.skills_dir / "bar" / "stale.txt").exists()


def test_install_invalid_package_runs_nothing(repo: SkillRepository) -> None:
    runner = FakeRunner()
    with pytest.raises(InvalidInputError):
        SkillInstaller(repo, run=runner).install("not-a-package")
    assert runner.calls == []


def test_install_clone_failure(repo: SkillRepository) -> None:
    runner = FakeRunner(clone_returncode=128)
    with pytest.raises(ExternalProcessError) as excinfo:
        SkillInstaller(repo, run=runner).install("x/y@bar")
    assert "repository not found" in excinfo.value.output
    assert repo.get_skill("bar") is None


def test_install_missing_git(repo: SkillRepository) -> None:
    with pytest.raises(ExternalProcessError):
        SkillInstaller(repo, run=FakeRunner(missing=True)).install("x/y@bar")


def test_install_skill_not_in_repository(repo: SkillRepository) -> None:
    runner = FakeRunner(repo_files={"skills/other/SKILL.md": skill_md("other")})
    with pytest.raises(SkillNotFoundError, match="not found in repository x/y"):
        SkillInstaller(repo, run=runner).install("x/y@bar")
    assert not runner.clone_destinations[0].exists()
    assert not (repo.skills_dir / "bar").exists()


def test_search_parses_command_output(repo: SkillRepository, config) -> None:
    runner = FakeRunner(
        search_output="acme/tools@deploy-helper 1.2K installs\n└ https://example.com/acme/tools\n"
    )
    results = SkillInstaller(repo, run=runner).search("deploy")

    assert [r.package for r in results] == ["acme/tools@deploy-helper"]
    assert runner.calls[0][1:] == [*config.search_command[1:], "deploy"]


def test_search_survives_missing_command(repo: SkillRepository) -> None:
    assert SkillInstaller(repo, run=FakeRunner(missing=True)).search("deploy") == []


# --- resolver ---
def test_resolve_prefers_repository_root(tmp_path: Path) -> None:
    write_tree(
        tmp_path,
        {"SKILL.md": skill_md("bar"), "skills/bar/SKILL.md": skill_md("bar")},
    )
    assert resolve_skill_source(tmp_path, "bar") == tmp_path


def test_resolve_ignores_root_with_other_name(tmp_path: Path) -> None:
    write_tree(
        tmp_path,
        {"SKILL.md": skill_md("root-skill"), "src/bar/SKILL.md": skill_md("bar")},
    )
    assert resolve_skill_source(tmp_path, "bar") == tmp_path / "src" / "bar"


def test_resolve_conventional_candidate_needs_skill_md(tmp_path: Path) -> None:
    write_tree(
        tmp_path,
        {"bar/readme.txt": "no skill here", "packages/bar/SKILL.md": skill_md("bar")},
    )
    assert resolve_skill_source(tmp_path, "bar") == tmp_path / "packages" / "bar"


def test_resolve_scans_for_declared_name(tmp_path: Path) -> None:
    write_tree(
        tmp_path,
        {
            "node_modules/pkg/bar/SKILL.md": skill_md("bar"),
            "docs/deep/custom-folder/SKILL.md": skill_md("bar"),
        },
    )
    assert resolve_skill_source(tmp_path, "bar") == tmp_path / "docs" / "deep" / "custom-folder"


def test_resolve_scans_for_folder_name(tmp_path: Path) -> None:
    write_tree(tmp_path, {"a/b/bar/SKILL.md": skill_md("renamed")})
    assert resolve_skill_source(tmp_path, "bar") == tmp_path / "a" / "b" / "bar"


def test_resolve_returns_none(tmp_path: Path) -> None:
    write_tree(tmp_path, {".git/bar/SKILL.md": skill_md("bar"), "x/SKILL.md": skill_md("x")})
    assert resolve_skill_source(tmp_path, "bar") is None
