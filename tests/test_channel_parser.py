import pytest

from epg_browser.exceptions import FileParseError
from epg_browser.services.channel_parser_service import parse_channel_file

from conftest import channels_xml

PATH = "sites/tvguide.co.uk/tvguide.co.uk.channels.xml"


def test_parses_attributes_and_text():
    content = channels_xml(
        '<channel site="tvguide.co.uk" lang="en" xmltv_id="BBCOne.uk" site_id="bbc1">BBC One</channel>',
    )

    [channel] = parse_channel_file(content, PATH)

    assert channel.site == "tvguide.co.uk"
    assert channel.lang == "en"
    assert channel.xmltv_id == "BBCOne.uk"
    assert channel.site_id == "bbc1"
    assert channel.name == "BBC One"
    assert channel.country == "United Kingdom"


def test_missing_attributes_use_defaults():
    content = channels_xml('<channel site_id="x2">  </channel>')

    [channel] = parse_channel_file(content, PATH)

    assert channel.site == "tvguide.co.uk"
    assert channel.lang == "en"
    assert channel.xmltv_id == ""
    assert channel.site_id == "x2"
    assert channel.name == "Unknown"
    # No id suffix, so the provider directory decides
    assert channel.country == "United Kingdom"


def test_empty_lang_falls_back_and_name_falls_back_to_xmltv_id():
    content = channels_xml('<channel lang="" xmltv_id="DasErste.de"/>')

    [channel] = parse_channel_file(content, PATH)

    assert channel.lang == "en"
    assert channel.name == "DasErste.de"
    assert channel.country == "Germany"


def test_keeps_document_order():
    content = channels_xml(
        '<channel xmltv_id="B.us">B</channel>',
        '<channel xmltv_id="A.us">A</channel>',
        '<channel xmltv_id="C.us">C</channel>',
    )

    names = [channel.name for channel in parse_channel_file(content, PATH)]

    assert names == ["B", "A", "C"]


def test_malformed_xml_raises():
    with pytest.raises(FileParseError):
        parse_channel_file(b"<channels><channel>broken</channels>", PATH)


def test_wrong_root_raises():
    with pytest.raises(FileParseError):
        parse_channel_file(b'<tv><channel id="a"/></tv>', PATH)


def test_no_channel_entries_raises():
    with pytest.raises(FileParseError):
        parse_channel_file(b"<channels></channels>", PATH)
