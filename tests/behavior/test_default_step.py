"""Tests for the tag default step."""

from dataclasses import dataclass, field

from structmap import Decoder, FieldPart
from structmap.behavior import cast, default, name


@dataclass
class ServerSettings:
    host: str = field(default="", metadata={"default": "localhost"})
    port: int = field(default=0, metadata={"default": "8080"})
    debug: bool = field(default=False, metadata={"default": "off"})
    label: str = ""


class TestDefaultFromTag:
    def test_fills_absent_value(self):
        part = FieldPart(identifier="host", type=str, tags={"default": "localhost"})
        default.from_tag()(part)
        assert part.value == "localhost"

    def test_keeps_present_value(self):
        part = FieldPart(
            identifier="host", type=str, tags={"default": "localhost"}, value="example.org"
        )
        default.from_tag()(part)
        assert part.value == "example.org"

    def test_no_tag_no_value(self):
        part = FieldPart(identifier="label", type=str)
        default.from_tag()(part)
        assert part.value is None

    def test_custom_tag_key(self):
        part = FieldPart(identifier="host", type=str, tags={"fallback": "h"})
        default.from_tag("fallback")(part)
        assert part.value == "h"

    def test_defaults_are_cast_to_field_type(self):
        settings = ServerSettings()
        decoder = Decoder(name.noop, default.from_tag(), cast.to_type())
        decoder.decode({"host": "example.org"}, settings)
        assert settings.host == "example.org"
        assert settings.port == 8080
        assert settings.debug is False
        assert settings.label == ""

    def test_default_replaces_none(self):
        settings = ServerSettings()
        decoder = Decoder(name.noop, default.from_tag(), cast.to_type())
        decoder.decode({"port": None}, settings)
        assert settings.port == 8080
