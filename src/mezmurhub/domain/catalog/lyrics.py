"""
Rich-text lyrics handling.

Lyrics arrive as HTML produced by the admin editor. Only paragraph and
line-break structure plus bold / italic emphasis survive; every other tag is
unwrapped (its text kept), script-like content and comments are dropped, and
all attributes are removed.
"""

from bs4 import BeautifulSoup, Comment

ALLOWED_TAGS = frozenset({"p", "br", "strong", "b", "em", "i"})
DROPPED_TAGS = ("script", "style", "iframe", "object", "embed", "template")


def sanitize_lyrics(markup: str) -> str:
    """Reduce editor HTML to the allowed bold/italic subset."""
    if not markup:
        return ""

    soup = BeautifulSoup(markup, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for tag in soup.find_all(DROPPED_TAGS):
        tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
        else:
            tag.attrs = {}

    return str(soup).strip()


def lyrics_text(markup: str) -> str:
    """Visible text of the lyrics, one line per paragraph or line break."""
    if not markup:
        return ""
    soup = BeautifulSoup(markup, "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for p in soup.find_all("p"):
        p.insert_before("\n")
        p.append("\n")
    lines = (line.strip() for line in soup.get_text().splitlines())
    return "\n".join(line for line in lines if line)


def is_blank_lyrics(markup: str) -> bool:
    """True when the markup has no visible text, e.g. an empty ``<p></p>``."""
    return not lyrics_text(markup)
