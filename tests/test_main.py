"""
Tests for the command line entry point.
"""

from pathlib import Path

from common.config import Config
from gateway.extraction_gateway import DirectExtractionGateway, HttpExtractionGateway
from main import build_gateway, parse_args


def test_parse_args_defaults_to_serve():
    """Test no subcommand means serving."""
    args = parse_args([])
    assert args.command is None
    assert args.config is None


def test_parse_args_suggest():
    """Test suggest collects items and preferences."""
    args = parse_args(
        ["--config", "alt.yaml", "suggest", "eggs", "milk", "--dietary", "vegetarian", "--direct"]
    )

    assert args.config == Path("alt.yaml")
    assert args.items == ["eggs", "milk"]
    assert args.dietary == "vegetarian"
    assert args.direct is True


def test_parse_args_scan():
    """Test scan takes an image path."""
    args = parse_args(["scan", "receipt.jpg"])
    assert args.image == Path("receipt.jpg")
    assert args.direct is False


def test_build_gateway_selects_transport():
    """Test --direct selects the in-process gateway."""
    config = Config()

    assert isinstance(build_gateway(config, direct=False), HttpExtractionGateway)
    assert isinstance(build_gateway(config, direct=True), DirectExtractionGateway)
