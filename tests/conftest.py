"""
Pytest configuration and shared fixtures for the test suite.

This module provides:
- A sample auto-caption style WebVTT document
- A temporary file holding that document
- Logger cleanup after CLI runs
"""

import logging

import pytest

SAMPLE_VTT = (
    "WEBVTT\n"
    "Kind: captions\n"
    "Language: en\n"
    "\n"
    "NOTE generated by an auto-captioning service\n"
    "\n"
    "00:00:00.160 --> 00:00:02.560 align:start position:0%\n"
    " \n"
    "when<00:00:00.199><c> I</c><00:00:00.280><c> started</c>\n"
    "\n"
    "intro\n"
    "00:00:02.560 --> 00:00:04.000\n"
    "<i>Music</i> &amp; lyrics\n"
    "second line\n"
)


@pytest.fixture
def sample_vtt():
    """Return the sample WebVTT document text."""
    return SAMPLE_VTT


@pytest.fixture
def sample_vtt_path(tmp_path):
    """Write the sample document to a temporary .vtt file and return its path."""
    path = tmp_path / "captions.vtt"
    path.write_text(SAMPLE_VTT, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI attaches so log capture starts clean in every test."""
    yield
    logger = logging.getLogger("vtt_payload")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
