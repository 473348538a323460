"""HTTP client that turns a recipe web page into plain text."""

from dataclasses import dataclass

import bs4
import httpx

from recipe_planner.services.inference import PageFetcher

_USER_AGENT = "Mozilla/5.0 (compatible; RecipePlanner/0.1)"


@dataclass
class HttpxPageFetcher(PageFetcher):
    """HTTPX-backed page fetcher."""

    http_client: httpx.AsyncClient
    timeout: float = 20.0

    @classmethod
    def create(cls, timeout: float = 20.0) -> "HttpxPageFetcher":
        """Create a page fetcher with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(
                follow_redirects=True, headers={"User-Agent": _USER_AGENT}
            ),
            timeout=timeout,
        )

    async def fetch_text(self, url: str) -> str:
        """Download the page and return its visible text."""
        response = await self.http_client.get(url, timeout=self.timeout)
        response.raise_for_status()
        return html_to_text(response.text)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def html_to_text(html: str) -> str:
    """Return the visible page text, preceded by any embedded JSON-LD data.

    Recipe sites usually publish a schema.org ``Recipe`` as JSON-LD, which is
    kept verbatim because it carries the structured times and quantities.
    """
    soup = bs4.BeautifulSoup(html, features="html.parser")
    structured = [
        (script.string or "").strip()
        for script in soup.find_all("script", attrs={"type": "application/ld+json"})
    ]
    for tag in soup(["script", "style", "noscript", "svg"]):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text("\n").splitlines())
    visible = "\n".join(line for line in lines if line)
    return "\n\n".join([*(data for data in structured if data), visible])
