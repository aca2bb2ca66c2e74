"""Turn generated HTML bodies into terminal text."""

from dataclasses import dataclass, field

from bs4 import BeautifulSoup


@dataclass
class Link:
    text: str
    href: str


@dataclass
class RenderedPage:
    """Plain text of a page plus its followable links, in document order."""
    text: str
    links: list[Link] = field(default_factory=list)


def render_page(html: str) -> RenderedPage:
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()

    links = []
    for anchor in soup.find_all("a", href=True):
        text = anchor.get_text(" ", strip=True) or anchor["href"]
        links.append(Link(text=text, href=anchor["href"]))

    lines = []
    for line in soup.get_text("\n").splitlines():
        line = " ".join(line.split())
        if line:
            lines.append(line)
    return RenderedPage(text="\n".join(lines), links=links)
