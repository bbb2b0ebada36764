"""Decode JUnit XML reports into :mod:`batsretry.report.models` and back."""
from __future__ import annotations

import contextlib
import copy
import math
import os
import stat
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Union
from xml.etree import ElementTree as ET

from batsretry.errors import MalformedReport

from .models import Case, Failure, Report

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
INDENT = "   "

# Colourised runner output leaks raw ESC characters into failure messages,
# which are not legal in XML 1.0.
ESCAPE_CHAR = "\x1b"
ESCAPE_REPLACEMENT = "    "

PathLike = Union[str, Path]


def normalize(text: str) -> str:
    return text.replace(ESCAPE_CHAR, ESCAPE_REPLACEMENT)


def decode(data: bytes) -> Report:
    """Parse report bytes into a :class:`Report`."""

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedReport(f"Report is not valid UTF-8: {exc}") from exc
    try:
        root = ET.fromstring(normalize(text).encode("utf-8"))
    except ET.ParseError as exc:
        raise MalformedReport(f"Failed to parse report: {exc}") from exc
    suite = _suite_element(root)
    name = suite.get("name")
    if not name:
        raise MalformedReport("testsuite element has no name attribute")
    return Report(
        name=name,
        properties=_parse_properties(suite),
        cases=[_parse_case(element) for element in suite.findall("testcase")],
        attributes=dict(suite.attrib),
        element=root,
    )


def encode(report: Report) -> bytes:
    """Serialize ``report``, syncing case markers and durations into the document."""

    if report.element is not None:
        root = copy.deepcopy(report.element)
    else:
        root = _build_document(report)
    suite = _suite_element(root)
    elements = suite.findall("testcase")
    if len(elements) != len(report.cases):
        raise ValueError(
            f"Report '{report.name}' has {len(report.cases)} cases but its document "
            f"has {len(elements)} testcase elements"
        )
    for element, case in zip(elements, report.cases):
        _sync_case(element, case)
    ET.indent(root, space=INDENT)
    body = ET.tostring(root, encoding="unicode")
    lines = [line.rstrip() for line in f"{XML_DECLARATION}\n{body}".splitlines()]
    while lines and not lines[-1]:
        lines.pop()
    return ("\n".join(lines) + "\n").encode("utf-8")


def read_report(path: PathLike) -> Report:
    return decode(Path(path).read_bytes())


def write_report(path: PathLike, report: Report) -> None:
    atomic_write_bytes(Path(path), encode(report))


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data``; a failed write leaves the old file untouched."""

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        if path.exists():
            os.chmod(tmp_name, stat.S_IMODE(path.stat().st_mode))
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


def format_seconds(value: float) -> str:
    """Whole seconds, rounded half away from zero, never negative."""

    return str(int(math.floor(max(0.0, value) + 0.5)))


def _suite_element(root: ET.Element) -> ET.Element:
    if root.tag == "testsuite":
        return root
    if root.tag == "testsuites":
        suites = root.findall("testsuite")
        if len(suites) != 1:
            raise MalformedReport(
                f"Expected exactly one testsuite inside testsuites, found {len(suites)}"
            )
        return suites[0]
    raise MalformedReport(f"Unexpected root element <{root.tag}>")


def _parse_properties(suite: ET.Element) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    for prop in suite.findall("properties/property"):
        key = prop.get("name")
        if not key:
            continue
        # Last definition wins when a property is repeated.
        properties[key] = prop.get("value", prop.text or "")
    return properties


def _parse_case(element: ET.Element) -> Case:
    name = element.get("name")
    if name is None:
        raise MalformedReport("testcase element has no name attribute")
    failure: Optional[Failure] = None
    failure_element = element.find("failure")
    if failure_element is not None:
        failure = Failure(
            type=failure_element.get("type", ""),
            message=failure_element.get("message", ""),
            text=failure_element.text or "",
        )
    skipped_element = element.find("skipped")
    skipped = None
    if skipped_element is not None:
        skipped = skipped_element.text or skipped_element.get("message", "")
    return Case(
        name=name,
        classname=element.get("classname", ""),
        duration=_parse_seconds(element.get("time"), name),
        failure=failure,
        skipped=skipped,
    )


def _parse_seconds(raw: Optional[str], case_name: str) -> float:
    if raw is None or not raw.strip():
        return 0.0
    try:
        return float(raw)
    except ValueError as exc:
        raise MalformedReport(f"Invalid time '{raw}' for testcase '{case_name}'") from exc


def _sync_case(element: ET.Element, case: Case) -> None:
    element.set("name", case.name)
    raw_time = element.get("time")
    if case.duration_changed:
        element.set("time", format_seconds(case.duration))
    elif raw_time is None:
        if case.duration:
            element.set("time", format_seconds(case.duration))
    elif _parse_seconds(raw_time, case.name) != case.duration:
        element.set("time", format_seconds(case.duration))

    failures = element.findall("failure")
    if case.failure is None:
        _remove_children(element, failures)
    elif not failures:
        child = ET.SubElement(element, "failure")
        if case.failure.type:
            child.set("type", case.failure.type)
        if case.failure.message:
            child.set("message", case.failure.message)
        child.text = case.failure.text or None

    skipped = element.findall("skipped")
    if case.skipped is None:
        _remove_children(element, skipped)
    elif not skipped:
        ET.SubElement(element, "skipped").text = case.skipped or None


def _remove_children(parent: ET.Element, children: List[ET.Element]) -> None:
    for child in children:
        parent.remove(child)
    if children and len(parent) == 0 and not (parent.text or "").strip():
        parent.text = None


def _build_document(report: Report) -> ET.Element:
    attributes = dict(report.attributes)
    attributes["name"] = report.name
    suite = ET.Element("testsuite", attributes)
    if report.properties:
        properties = ET.SubElement(suite, "properties")
        for key, value in report.properties.items():
            ET.SubElement(properties, "property", {"name": key, "value": value})
    for case in report.cases:
        attrs = {"name": case.name}
        if case.classname:
            attrs["classname"] = case.classname
        ET.SubElement(suite, "testcase", attrs)
    return suite
