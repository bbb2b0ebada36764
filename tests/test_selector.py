from __future__ import annotations

from pathlib import Path

import pytest

from batsretry.errors import UnresolvableSource
from batsretry.plan import resolve_source_file, select_cases
from batsretry.report import decode

from conftest import junit_document


def test_select_returns_non_passing_cases_in_document_order() -> None:
    cases = [
        ("a", "passed"),
        ("b", "skipped"),
        ("c", "failed"),
        ("d", "passed"),
        ("e", "failed"),
    ]
    report = decode(junit_document("web.bats", cases).encode())
    selection = select_cases(report)
    assert selection.case_names == ("b", "c", "e")
    assert selection.source_file == Path("/src/tests/web.bats")


def test_select_drops_passing_cases_silently() -> None:
    report = decode(junit_document("web.bats", [("a", "passed")]).encode())
    assert select_cases(report).case_names == ()


def test_missing_base_directory_is_an_error() -> None:
    report = decode(junit_document("web.bats", [("a", "failed")], base_dir=None).encode())
    with pytest.raises(UnresolvableSource) as exc:
        select_cases(report)
    assert "BATS_CWD" in str(exc.value)


def test_empty_base_directory_is_an_error() -> None:
    report = decode(junit_document("web.bats", [], base_dir="").encode())
    with pytest.raises(UnresolvableSource):
        resolve_source_file(report)


def test_custom_base_directory_property() -> None:
    data = b"""<testsuite name="web.bats">
      <properties><property name="WORKDIR" value="/repo/test"/></properties>
      <testcase name="a"><failure/></testcase>
    </testsuite>"""
    selection = select_cases(decode(data), base_dir_property="WORKDIR")
    assert selection.source_file == Path("/repo/test/web.bats")
    assert selection.case_names == ("a",)


def test_absolute_suite_name_stays_under_base_directory() -> None:
    data = b"""<testsuite name="/nested/web.bats">
      <properties><property name="BATS_CWD" value="/src/tests"/></properties>
    </testsuite>"""
    assert resolve_source_file(decode(data)) == Path("/src/tests/nested/web.bats")
