"""Tests for the built-image registry."""

import pytest

from shipyard.exceptions import BuiltImageError
from shipyard.start.registry import BuiltImageRegistry, parse_built_image


def test_resolves_registered_alias():
    registry = BuiltImageRegistry()
    registry.register("built-image", "the-image-id")

    assert registry.resolve("built-image") == "the-image-id"
    assert registry.resolve("built-image") == "the-image-id"
    assert "built-image" in registry


def test_unknown_image_is_returned_unchanged():
    registry = BuiltImageRegistry({"app": "sha256:abc"})

    assert registry.resolve("postgres:16") == "postgres:16"
    assert len(registry) == 1


@pytest.mark.parametrize(
    "value,expected",
    [
        ("app=sha256:abc", ("app", "sha256:abc")),
        (" app = abc ", ("app", "abc")),
        ("app=registry:5000/img=x", ("app", "registry:5000/img=x")),
    ],
)
def test_parse_built_image(value, expected):
    assert parse_built_image(value) == expected


@pytest.mark.parametrize("value", ["app", "=abc", "app=", ""])
def test_parse_built_image_rejects_malformed(value):
    with pytest.raises(BuiltImageError):
        parse_built_image(value)
