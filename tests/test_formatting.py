"""Tests for reference list formatting."""

import pytest

from bibcite.bibliography import list_entries
from bibcite.formatting import (
    TAILS,
    EntryFormatter,
    detect_enhancer,
    plain_text,
    render_bibliography_list,
)

HEAD = "<span>Smith, J.</span> (2020). <i>Title</i>"


def format_one(make_blob, make_item, enhancer=None, **fields):
    fields.setdefault("title", "Title")
    records = list_entries(make_blob(make_item("k", **fields)))
    return EntryFormatter(enhancer).format_entry(records["k"])


class TestEntryTypes:
    """Tests for per-type entry tails."""

    def test_book(self, make_blob, make_item):
        entry = format_one(
            make_blob, make_item, item_type="book", edition="2nd ed.", publisher="Penguin"
        )
        assert entry == HEAD + " (2nd ed.). Penguin."

    def test_book_without_publisher(self, make_blob, make_item):
        assert format_one(make_blob, make_item, item_type="book") == HEAD + "."

    def test_journal_article(self, make_blob, make_item):
        entry = format_one(
            make_blob,
            make_item,
            item_type="journalArticle",
            publicationTitle="Nature",
            volume="12",
            pages="1-10",
            DOI="10.1000/xyz",
        )
        assert entry == (
            HEAD
            + ". Nature, 12, 1-10."
            + ' <a href="https://doi.org/10.1000/xyz" target="_blank">10.1000/xyz</a>'
        )

    def test_journal_article_without_journal(self, make_blob, make_item):
        entry = format_one(make_blob, make_item, item_type="journalArticle", volume="12")
        assert entry == HEAD + "."

    def test_webpage_with_access_date(self, make_blob, make_item):
        entry = format_one(
            make_blob,
            make_item,
            item_type="webpage",
            websiteTitle="Example Site",
            url="https://www.example.com/page",
            accessDate="2021-06-01T08:30:00Z",
        )
        assert entry == (
            HEAD
            + ". Example Site."
            + " Retrieved June 1, 2021, from "
            + '<a href="https://www.example.com/page" target="_blank">'
            + '<span class="url-domain">example.com</span>'
            + '<span class="url-path">/page</span></a>'
        )

    def test_unparseable_access_date_is_shown_raw(self, make_blob, make_item):
        entry = format_one(
            make_blob,
            make_item,
            item_type="blogPost",
            url="https://blog.example.com",
            accessDate="last <week>",
        )
        assert "Retrieved last &lt;week&gt;, from <a" in entry

    def test_presentation(self, make_blob, make_item):
        entry = format_one(
            make_blob,
            make_item,
            item_type="presentation",
            presentationType="Keynote",
            meetingName="PyCon",
        )
        assert entry == HEAD + " [Keynote]. PyCon."

    def test_interview_and_film(self, make_blob, make_item):
        interview = format_one(
            make_blob, make_item, item_type="interview", interviewMedium="Radio"
        )
        film = format_one(make_blob, make_item, item_type="film", genre="Documentary")

        assert interview == HEAD + ". Radio."
        assert film == HEAD + " [Documentary]."

    def test_podcast(self, make_blob, make_item):
        entry = format_one(
            make_blob,
            make_item,
            item_type="podcast",
            seriesTitle="The Show",
            episodeNumber="42",
        )
        assert entry == HEAD + ". The Show (No. 42)."

    def test_newspaper_article_without_url(self, make_blob, make_item):
        entry = format_one(
            make_blob,
            make_item,
            item_type="newspaperArticle",
            publicationTitle="The Times",
            accessDate="2021-06-01",
        )
        assert entry == HEAD + ". The Times."

    @pytest.mark.parametrize("item_type", ["misc", "thesis", "report"])
    def test_fallback_prefers_doi_then_url(self, make_blob, make_item, item_type):
        with_doi = format_one(
            make_blob, make_item, item_type=item_type, DOI="10.1/a", url="https://x.org"
        )
        with_url = format_one(make_blob, make_item, item_type=item_type, url="https://x.org")
        bare = format_one(make_blob, make_item, item_type=item_type)

        assert with_doi == HEAD + '. <a href="https://doi.org/10.1/a" target="_blank">10.1/a</a>'
        assert with_url == (
            HEAD
            + '. <a href="https://x.org" target="_blank">'
            + '<span class="url-domain">x.org</span></a>'
        )
        assert bare == HEAD + "."

    def test_every_known_type_has_a_tail(self):
        assert set(TAILS) == {
            "book",
            "journalArticle",
            "webpage",
            "presentation",
            "interview",
            "blogPost",
            "podcast",
            "film",
            "newspaperArticle",
        }


class TestEscapingAndEnhancement:
    """Tests for escaping and text enhancement."""

    def test_fields_are_escaped(self, make_blob, make_item):
        entry = format_one(
            make_blob,
            make_item,
            item_type="book",
            title="<script>alert(1)</script>",
            publisher="Smith & Sons",
        )
        assert "<script>" not in entry
        assert "<i>&lt;script&gt;alert(1)&lt;/script&gt;</i>" in entry
        assert "Smith &amp; Sons." in entry

    def test_enhancer_applies_to_prose_fields(self, make_blob, make_item):
        entry = format_one(
            make_blob,
            make_item,
            enhancer=str.upper,
            item_type="book",
            title="Title",
            publisher="Penguin",
        )
        assert entry == "<span>Smith, J.</span> (2020). <i>TITLE</i>. PENGUIN."

    def test_default_enhancer_is_plain_text(self):
        assert EntryFormatter().enhancer is plain_text
        assert plain_text('"a" -- b') == '"a" -- b'

    def test_detect_enhancer_without_smartypants(self, monkeypatch):
        monkeypatch.setattr("importlib.util.find_spec", lambda name: None)
        assert detect_enhancer() is plain_text


class TestRenderBibliographyList:
    """Tests for render_bibliography_list."""

    def test_empty_bibliography(self):
        assert render_bibliography_list("") == ""
        assert render_bibliography_list('{"items": []}') == ""

    def test_one_item_per_record_in_source_order(self, make_blob, make_item):
        blob = make_blob(make_item("b"), make_item("a"), make_item("c", last_names=("Doe",)))

        html = render_bibliography_list(blob)

        assert html.startswith('<ul class="bibliography"><li id="b">')
        assert html.endswith("</li></ul>")
        assert html.count("<li ") == 3
        assert html.index('id="b"') < html.index('id="a"') < html.index('id="c"')
        # Disambiguated years appear in the entries
        assert '<li id="a"><span>Smith, J.</span> (2020a).' in html
        assert '<li id="b"><span>Smith, J.</span> (2020b).' in html
        assert '<li id="c"><span>Doe, J.</span> (2020).' in html

    def test_entries_joined_by_newlines(self, make_blob, make_item):
        html = render_bibliography_list(make_blob(make_item("a"), make_item("b", date="2019")))

        assert html.count("\n") == 1
        assert "</li>\n<li" in html

    def test_ids_are_escaped(self, make_blob):
        html = render_bibliography_list(make_blob({"citationKey": 'a"b<c'}))

        assert '<li id="a&quot;b&lt;c">' in html
