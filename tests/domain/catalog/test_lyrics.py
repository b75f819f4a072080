"""Tests for rich-text lyrics handling."""

import pytest

from mezmurhub.domain.catalog.lyrics import is_blank_lyrics, lyrics_text, sanitize_lyrics


class TestSanitizeLyrics:
    def test_keeps_bold_and_italic(self):
        markup = "<p><strong>Holy</strong> <em>holy</em><br>holy</p>"
        assert sanitize_lyrics(markup) == "<p><strong>Holy</strong> <em>holy</em><br/>holy</p>"

    def test_strips_attributes_and_unknown_tags(self):
        markup = '<p onclick="x()"><a href="http://x">Link</a> <u>text</u></p>'
        assert sanitize_lyrics(markup) == "<p>Link text</p>"

    def test_drops_scripts_and_comments(self):
        markup = "<p>Verse<!-- note --><script>alert(1)</script></p><style>p{}</style>"
        assert sanitize_lyrics(markup) == "<p>Verse</p>"

    def test_empty(self):
        assert sanitize_lyrics("") == ""


class TestBlankLyrics:
    @pytest.mark.parametrize("markup", ["", "   ", "<p></p>", "<p> <br></p>"])
    def test_blank(self, markup):
        assert is_blank_lyrics(markup)

    @pytest.mark.parametrize("markup", ["<p>Amen</p>", "Amen<p></p>", "<p><br><em>Amen</em></p>"])
    def test_not_blank(self, markup):
        assert not is_blank_lyrics(markup)


def test_lyrics_text_one_line_per_paragraph():
    markup = "<p>Line one<br>Line two</p><p>Line three</p>"
    assert lyrics_text(markup) == "Line one\nLine two\nLine three"


def test_lyrics_text_keeps_text_outside_paragraphs():
    assert lyrics_text("Intro<p>Verse</p>") == "Intro\nVerse"
