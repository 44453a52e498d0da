"""Tests for the command-line entry point."""
import json

import pytest

from whiskey_crawler import cli


def test_extract_from_file(tmp_path, capsys, heading_only_page, product_url):
    page_file = tmp_path / "page.html"
    page_file.write_text(heading_only_page, encoding="utf-8")

    exit_code = cli.main(["--file", str(page_file), product_url])

    document = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert document["koreanName"] == "맥캘란 18년"
    assert document["refUrl"] == product_url


def test_nothing_found(tmp_path, capsys, empty_page):
    page_file = tmp_path / "page.html"
    page_file.write_text(empty_page, encoding="utf-8")

    exit_code = cli.main(["--file", str(page_file)])

    assert exit_code == 1
    assert "no product data" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert cli.main(["--file", str(tmp_path / "missing.html")]) == 2


def test_undecodable_file(tmp_path, capsys):
    page_file = tmp_path / "page.html"
    page_file.write_bytes(b"\xff\xfe\xfa bad")

    assert cli.main(["--file", str(page_file)]) == 2
    assert "error:" in capsys.readouterr().err


def test_fetch_error_is_reported(capsys):
    assert cli.main(["https://example.com/item/1"]) == 2
    assert "Unsupported URL" in capsys.readouterr().err


def test_requires_url_or_file():
    with pytest.raises(SystemExit):
        cli.main([])
