"""
Country classification for channel entries.

Maps an XMLTV id (e.g. 'BBCOne.uk') or a site label (e.g. 'tvguide.co.uk')
to a country display name by suffix matching. The table order decides ties.
"""

INTERNATIONAL = "International"

COUNTRY_SUFFIXES: tuple[tuple[str, str], ...] = (
    (".us", "United States"),
    (".uk", "United Kingdom"),
    (".ca", "Canada"),
    (".au", "Australia"),
    (".de", "Germany"),
    (".fr", "France"),
    (".es", "Spain"),
    (".it", "Italy"),
    (".nl", "Netherlands"),
    (".br", "Brazil"),
    (".mx", "Mexico"),
    (".ar", "Argentina"),
    (".in", "India"),
    (".jp", "Japan"),
    (".kr", "South Korea"),
    (".cn", "China"),
    (".ru", "Russia"),
    (".se", "Sweden"),
    (".no", "Norway"),
    (".dk", "Denmark"),
    (".fi", "Finland"),
    (".pl", "Poland"),
    (".tr", "Turkey"),
    (".za", "South Africa"),
    (".nz", "New Zealand"),
    (".ie", "Ireland"),
    (".pt", "Portugal"),
    (".gr", "Greece"),
    (".ch", "Switzerland"),
    (".at", "Austria"),
    (".be", "Belgium"),
    (".cz", "Czech Republic"),
    (".ro", "Romania"),
    (".hu", "Hungary"),
    (".il", "Israel"),
    (".ae", "United Arab Emirates"),
    (".sg", "Singapore"),
    (".th", "Thailand"),
    (".my", "Malaysia"),
    (".id", "Indonesia"),
    (".ph", "Philippines"),
    (".vn", "Vietnam"),
)


def classify_country(xmltv_id: str, site_label: str) -> str:
    """
    Derive a country name for a channel.

    The XMLTV id is checked first (case-insensitive, dotted suffix anywhere in
    the id). Only when nothing matches is the site label checked for the bare
    two-letter token (case-sensitive).

    Args:
        xmltv_id: Channel XMLTV id, may be empty
        site_label: Provider/site name the channel came from

    Returns:
        Country display name, or 'International' when nothing matches
    """
    lowered_id = xmltv_id.lower()
    for suffix, country in COUNTRY_SUFFIXES:
        if suffix in lowered_id:
            return country

    for suffix, country in COUNTRY_SUFFIXES:
        if suffix[1:] in site_label:
            return country

    return INTERNATIONAL
