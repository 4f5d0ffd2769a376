"""Tests for RSS item extraction."""

from datetime import datetime, timezone
from unittest.mock import patch

from podtimeline import extractor
from podtimeline.extractor import extract_items, parse_pub_date
from podtimeline.models import EpisodeType

from tests.conftest import make_feed, make_item


class TestExtractItems:
    """Test per-item field extraction."""

    def test_plain_fields(self) -> None:
        """Plain-text fields are trimmed and typed."""
        doc = make_feed(
            make_item(
                title="  Show [12]  ",
                link=" https://example.com/12 ",
                description="Hosts talk.",
                extra=(
                    "<itunes:duration>01:02:03</itunes:duration>"
                    "<itunes:explicit>true</itunes:explicit>"
                    '<enclosure url="https://cdn.example.com/12.mp3" length="123" type="audio/mpeg"/>'
                ),
            )
        )

        items = extract_items(doc, source="fface")

        assert len(items) == 1
        item = items[0]
        assert item.title == "Show [12]"
        assert item.link == "https://example.com/12"
        assert item.description == "Hosts talk."
        assert item.pub_date == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert item.episode_type is EpisodeType.PODCAST
        assert item.duration == "01:02:03"
        assert item.is_explicit is True
        assert item.enclosure_url == "https://cdn.example.com/12.mp3"
        assert item.source == "fface"

    def test_cdata_fields(self) -> None:
        """CDATA title and multi-line description are unwrapped."""
        doc = make_feed(
            make_item(title="Draft Day", description="<p>line one</p>\n<p>line two</p>", cdata=True)
        )

        item = extract_items(doc)[0]

        assert item.title == "Draft Day"
        assert item.description == "<p>line one</p>\n<p>line two</p>"
        assert item.episode_type is EpisodeType.DRAFT

    def test_optional_fields_default(self) -> None:
        """Missing optional fields come back as None / False."""
        item = extract_items(make_feed(make_item(title="Random Chat")))[0]

        assert item.description is None
        assert item.duration is None
        assert item.enclosure_url is None
        assert item.episode_number is None
        assert item.is_explicit is False
        assert item.episode_type is EpisodeType.BONUS

    def test_missing_link_dropped(self) -> None:
        """An item without <link> is excluded; others survive."""
        doc = make_feed(
            make_item(title="No Link", link=None),
            make_item(title="Has Link"),
        )

        titles = [i.title for i in extract_items(doc)]

        assert titles == ["Has Link"]

    def test_missing_title_or_date_dropped(self) -> None:
        doc = make_feed(make_item(title=None), make_item(pub_date=None), make_item(title=" "))

        assert extract_items(doc) == []

    def test_unparseable_pubdate_dropped(self) -> None:
        """An item whose pubDate isn't a date never enters the pipeline."""
        doc = make_feed(
            make_item(title="Bad Date", pub_date="garbage-date"),
            make_item(title="Good Date"),
        )

        titles = [i.title for i in extract_items(doc)]

        assert titles == ["Good Date"]

    def test_no_items(self) -> None:
        """Documents without items are empty, not errors."""
        assert extract_items(make_feed()) == []
        assert extract_items("") == []
        assert extract_items("<html><body>503 Service Unavailable</body></html>") == []

    def test_itunes_episode_preferred(self) -> None:
        """itunes:episode beats the bracket suffix."""
        doc = make_feed(make_item(title="Show [12]", extra="<itunes:episode>99</itunes:episode>"))

        assert extract_items(doc)[0].episode_number == "99"

    def test_bracket_episode_fallback(self) -> None:
        """Without itunes:episode the trailing [N] is used."""
        doc = make_feed(make_item(title="Show [12]"))

        assert extract_items(doc)[0].episode_number == "12"

    def test_itunes_title_ignored(self) -> None:
        """The podcast-namespace title doesn't shadow the plain one."""
        doc = make_feed(make_item(title="Real Title", extra="<itunes:title>Other</itunes:title>"))

        assert extract_items(doc)[0].title == "Real Title"

    def test_enclosure_attribute_order(self) -> None:
        """The url attribute is found wherever it sits."""
        doc = make_feed(
            make_item(extra='<enclosure type="audio/mpeg" length="1" url="https://cdn.example.com/a.mp3"/>')
        )

        assert extract_items(doc)[0].enclosure_url == "https://cdn.example.com/a.mp3"

    def test_explicit_variants(self) -> None:
        doc = make_feed(
            make_item(title="A", extra="<itunes:explicit>yes</itunes:explicit>"),
            make_item(title="B", extra="<itunes:explicit>false</itunes:explicit>"),
            make_item(title="C", extra="<itunes:explicit>clean</itunes:explicit>"),
        )

        flags = {i.title: i.is_explicit for i in extract_items(doc)}

        assert flags == {"A": True, "B": False, "C": False}

    def test_entities_unescaped(self) -> None:
        doc = make_feed(make_item(title="Q &amp; A", description="a &lt;b&gt; c"))

        item = extract_items(doc)[0]

        assert item.title == "Q & A"
        assert item.description == "a <b> c"

    def test_bytes_input(self) -> None:
        doc = make_feed(make_item(title="Café Chat")).encode("utf-8")

        assert extract_items(doc)[0].title == "Café Chat"

    def test_item_failure_does_not_abort(self) -> None:
        """An exception inside one block is logged and skipped."""
        real_parse = extractor.parse_item

        def flaky(block, source=None):
            if "Explodes" in block.get_text():
                raise RuntimeError("boom")
            return real_parse(block, source=source)

        doc = make_feed(make_item(title="Explodes"), make_item(title="Fine"))

        with patch("podtimeline.extractor.parse_item", side_effect=flaky):
            titles = [i.title for i in extract_items(doc)]

        assert titles == ["Fine"]


class TestParsePubDate:
    """Test publish date parsing."""

    def test_rfc822(self) -> None:
        dt = parse_pub_date("Tue, 05 Mar 2024 08:30:00 +0000")
        assert dt == datetime(2024, 3, 5, 8, 30, tzinfo=timezone.utc)

    def test_offset_preserved(self) -> None:
        dt = parse_pub_date("Tue, 05 Mar 2024 08:30:00 -0500")
        assert dt == datetime(2024, 3, 5, 13, 30, tzinfo=timezone.utc)

    def test_named_us_zones(self) -> None:
        dt = parse_pub_date("Mon, 01 Jan 2024 12:00:00 EST")
        assert dt == datetime(2024, 1, 1, 17, 0, tzinfo=timezone.utc)
        assert dt.utcoffset().total_seconds() == -5 * 3600

        assert parse_pub_date("Mon, 01 Jul 2024 12:00:00 PDT") == datetime(
            2024, 7, 1, 19, 0, tzinfo=timezone.utc
        )

    def test_naive_taken_as_utc(self) -> None:
        dt = parse_pub_date("2024-01-05T10:00:00")
        assert dt.tzinfo is not None
        assert dt == datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)

    def test_invalid(self) -> None:
        assert parse_pub_date("garbage-date") is None
        assert parse_pub_date("") is None
