import pytest

from epg_browser.services.country_classifier import (
    COUNTRY_SUFFIXES,
    INTERNATIONAL,
    classify_country,
)


@pytest.mark.parametrize("suffix,country", COUNTRY_SUFFIXES)
def test_every_suffix_maps_to_its_country(suffix, country):
    assert classify_country(f"Channel{suffix}", "") == country


@pytest.mark.parametrize("suffix,country", COUNTRY_SUFFIXES)
def test_xmltv_id_match_is_case_insensitive(suffix, country):
    assert classify_country(f"CHANNEL{suffix.upper()}", "") == country


def test_table_has_unique_ordered_suffixes():
    suffixes = [suffix for suffix, _ in COUNTRY_SUFFIXES]
    assert len(suffixes) == len(set(suffixes)) == 42
    assert suffixes[:3] == [".us", ".uk", ".ca"]
    assert all(suffix.startswith(".") and len(suffix) == 3 for suffix in suffixes)


def test_first_listed_suffix_wins():
    # .us is listed before .uk, .ca before .de
    assert classify_country("Foo.uk.us", "") == "United States"
    assert classify_country("Bar.de.ca", "") == "Canada"


def test_substring_anywhere_in_id_matches():
    assert classify_country("BBCOne.uk@HD", "") == "United Kingdom"


def test_site_label_used_when_id_has_no_suffix():
    assert classify_country("", "tvguide.co.uk") == "United Kingdom"
    assert classify_country("NoSuffix", "tvtoday.de") == "Germany"


def test_id_match_beats_site_label():
    assert classify_country("DasErste.de", "tvguide.co.uk") == "Germany"


def test_site_label_match_is_case_sensitive():
    assert classify_country("", "SITE.UK") == INTERNATIONAL


def test_international_fallback():
    assert classify_country("Channel1", "qqq") == INTERNATIONAL
    assert classify_country("", "") == INTERNATIONAL


def test_classification_is_deterministic():
    first = classify_country("Rai1.it", "raiplay.it")
    assert classify_country("Rai1.it", "raiplay.it") == first == "Italy"
