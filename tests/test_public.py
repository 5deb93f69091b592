from __future__ import annotations

import pytest

from autoskills.errors import InvalidInputError
from autoskills.public import (
    parse_install_count,
    parse_package,
    parse_search_output,
    strip_ansi,
)


def test_parse_single_result_with_url() -> None:
    output = "acme/tools@deploy-helper 1.2K installs\n└ https://example.com/acme/tools\n"
    results = parse_search_output(output)

    assert len(results) == 1
    assert results[0].package == "acme/tools@deploy-helper"
    assert results[0].installs == 1200
    assert results[0].url == "https://example.com/acme/tools"


def test_parse_without_matches_is_empty() -> None:
    assert parse_search_output("") == []
    assert parse_search_output("No skills found for 'zzz'\nTry another query\n") == []


def test_parse_strips_colors_and_sorts_by_installs() -> None:
    output = (
        "\x1b[1mSearch results\x1b[0m\r\n"
        "\x1b[36mone/repo@small\x1b[0m 12 installs\r\n"
        "\r\n"
        "  two/repo@big 3M installs\n"
        "  └ https://skills.sh/two/repo/big\n"
        "three/repo@mid 4,500 installs\n"
        "four/repo@single 1 install\n"
    )
    results = parse_search_output(output)

    assert [r.package for r in results] == [
        "two/repo@big",
        "three/repo@mid",
        "one/repo@small",
        "four/repo@single",
    ]
    assert [r.installs for r in results] == [3_000_000, 4500, 12, 1]
    assert results[0].url == "https://skills.sh/two/repo/big"
    # no explicit URL line: default listing URL
    assert results[2].url == "https://skills.sh/one/repo/small"


def test_strip_ansi() -> None:
    assert strip_ansi("\x1b[32mok\x1b[0m\r") == "ok"


@pytest.mark.parametrize(
    "text, expected",
    [("950", 950), ("1,024", 1024), ("1.2K", 1200), ("2.5m", 2_500_000), ("", 0), ("x", 0)],
)
def test_parse_install_count(text: str, expected: int) -> None:
    assert parse_install_count(text) == expected


def test_parse_package() -> None:
    assert parse_package("acme/tools@deploy-helper") == ("acme", "tools", "deploy-helper")
    for bad in ("acme/tools", "acme@tools", "acme/tools@", "a/b/c@d", ""):
        with pytest.raises(InvalidInputError):
            parse_package(bad)
