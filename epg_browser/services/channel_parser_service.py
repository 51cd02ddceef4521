import logging

from lxml import etree # type: ignore

from epg_browser.exceptions import FileParseError
from epg_browser.services.country_classifier import classify_country
from epg_browser.services.fetch_types import ChannelPayload, FileDescriptor

logger = logging.getLogger(__name__)

DEFAULT_LANG = "en"
UNKNOWN_NAME = "Unknown"


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True)


def parse_channel_file(content: bytes, file_path: str) -> list[ChannelPayload]:
    """
    Parse a *.channels.xml document into channel payloads

    Args:
        content: Raw file content
        file_path: Path of the file in the upstream tree (e.g. 'sites/tvguide.com/tvguide.com.channels.xml')

    Returns:
        List of ChannelPayload in document order

    Raises:
        FileParseError: If the XML is malformed or has no <channels>/<channel> entries
    """
    logger.debug(f"Parsing channel file: {file_path}")

    try:
        root = etree.fromstring(content, parser=_make_parser())
    except etree.XMLSyntaxError as e:
        raise FileParseError(f"Malformed XML in {file_path}: {e}") from e

    if root is None or root.tag != "channels":
        raise FileParseError(f"Expected <channels> root in {file_path}")

    entries = root.findall("channel")
    if not entries:
        raise FileParseError(f"No <channel> entries in {file_path}")

    site_name = FileDescriptor(path=file_path, type="blob").site_name
    channels = [_parse_channel(entry, site_name) for entry in entries]

    logger.debug(f"  Found {len(channels)} channels in {file_path}")
    return channels


def _parse_channel(channel: etree._Element, site_name: str) -> ChannelPayload:
    """Build a payload from a single <channel> element"""
    xmltv_id = channel.get("xmltv_id") or ""
    name = (channel.text or "").strip()

    return ChannelPayload(
        site=channel.get("site") or site_name,
        lang=channel.get("lang") or DEFAULT_LANG,
        xmltv_id=xmltv_id,
        site_id=channel.get("site_id") or "",
        name=name or xmltv_id or UNKNOWN_NAME,
        country=classify_country(xmltv_id, site_name),
    )
