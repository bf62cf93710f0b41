"""HTTP clients for the Wiktionary and Wikidata APIs.

Both services ask bots to back off when they are overloaded (the `maxlag`
parameter, HTTP 429/503). Those answers raise TransientServiceError and are
retried with a fixed delay through RetryPolicy; answers that are not JSON
raise MalformedResponseError and are never retried.
"""

import logging
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, TypeVar

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_fixed,
)

from verb_lexemes.errors import MalformedResponseError, TransientServiceError

logger = logging.getLogger(__name__)

WIKTIONARY_API = "https://en.wiktionary.org/w/api.php"
WIKIDATA_API = "https://www.wikidata.org/w/api.php"
USER_AGENT = "verb-lexemes/0.1 (finds English verbs from Wiktionary missing on Wikidata)"

DEFAULT_CATEGORY = "Category:English verbs"
CATEGORY_PAGE_SIZE = 500
MAXLAG = 5
REQUEST_TIMEOUT = 30

# Seconds to wait before retrying an overloaded service
LOOKUP_RETRY_DELAY = 10.0
LISTING_RETRY_DELAY = 15.0

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry on TransientServiceError.

    `max_attempts=None` retries forever, which is what an unattended crawl
    wants: it keeps waiting out the rate limit until the listing is done.
    """

    delay: float = LOOKUP_RETRY_DELAY
    max_attempts: int | None = None
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def retrying(self) -> Retrying:
        stop = stop_never if self.max_attempts is None else stop_after_attempt(self.max_attempts)
        return Retrying(
            retry=retry_if_exception_type(TransientServiceError),
            wait=wait_fixed(self.delay),
            stop=stop,
            sleep=self.sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call `fn`, retrying it according to this policy."""
        return self.retrying()(fn, *args, **kwargs)


@dataclass(frozen=True)
class CategoryPage:
    """One page of a category listing."""

    items: list[str]
    continuation: str | None = None


def build_session(user_agent: str = USER_AGENT) -> requests.Session:
    """Create a requests session identifying this tool to the Wikimedia APIs."""
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


def _get_json(session: requests.Session, url: str, params: dict[str, Any]) -> dict[str, Any]:
    """GET a Wikimedia API URL and decode the JSON body.

    Network failures and overload statuses are transient; a body that is not
    a JSON object is malformed.
    """
    try:
        response = session.get(url, params=params, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise TransientServiceError(f"Request to {url} failed: {e}") from e

    if response.status_code == 429 or response.status_code >= 500:
        raise TransientServiceError(f"{url} answered HTTP {response.status_code}")

    try:
        data = response.json()
    except ValueError as e:
        raise MalformedResponseError(f"Invalid JSON from {url}: {response.text[:200]!r}") from e

    if not isinstance(data, dict):
        msg = f"Expected a JSON object from {url}, got {type(data).__name__}"
        raise MalformedResponseError(msg)
    return data


def _api_error(data: dict[str, Any]) -> dict[str, Any] | None:
    error = data.get("error")
    if error is None:
        return None
    return error if isinstance(error, dict) else {"code": str(error)}


class WiktionaryClient:
    """Reads category listings and page wikitext from Wiktionary."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        api_url: str = WIKTIONARY_API,
        page_size: int = CATEGORY_PAGE_SIZE,
        listing_policy: RetryPolicy | None = None,
        fetch_policy: RetryPolicy | None = None,
    ) -> None:
        self.session = session or build_session()
        self.api_url = api_url
        self.page_size = page_size
        self.listing_policy = listing_policy or RetryPolicy(LISTING_RETRY_DELAY)
        self.fetch_policy = fetch_policy or RetryPolicy(LOOKUP_RETRY_DELAY)

    def _list_once(self, category: str, continuation: str | None) -> CategoryPage:
        params: dict[str, Any] = {
            "action": "query",
            "list": "categorymembers",
            "cmtitle": category,
            "cmlimit": self.page_size,
            "format": "json",
        }
        if continuation:
            params["cmcontinue"] = continuation

        data = _get_json(self.session, self.api_url, params)
        error = _api_error(data)
        if error is not None:
            raise TransientServiceError(f"Category listing failed: {error.get('code')}")

        try:
            members = data["query"]["categorymembers"]
            items = [member["title"] for member in members]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(f"Unexpected category listing shape: {e!r}") from e

        token = data.get("continue", {}).get("cmcontinue")
        return CategoryPage(items=items, continuation=token or None)

    def list_category_page(
        self, category: str = DEFAULT_CATEGORY, continuation: str | None = None
    ) -> CategoryPage:
        """Fetch one page of category members, retrying while the API is busy."""
        return self.listing_policy.call(self._list_once, category, continuation)

    def iter_category(self, category: str = DEFAULT_CATEGORY) -> Iterator[CategoryPage]:
        """Yield every page of a category until no continuation token is returned."""
        continuation: str | None = None
        while True:
            page = self.list_category_page(category, continuation)
            yield page
            if not page.continuation:
                logger.info("Category listing exhausted: %s", category)
                return
            continuation = page.continuation

    def _fetch_once(self, title: str) -> str:
        params = {
            "action": "parse",
            "prop": "wikitext",
            "format": "json",
            "maxlag": MAXLAG,
            "page": title,
        }
        data = _get_json(self.session, self.api_url, params)
        error = _api_error(data)
        if error is not None:
            if error.get("code") == "missingtitle":
                logger.debug("No Wiktionary page for %r", title)
                return ""
            raise TransientServiceError(f"Fetching {title!r} failed: {error.get('code')}")

        try:
            wikitext = data["parse"]["wikitext"]["*"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(f"Unexpected parse response for {title!r}: {e!r}") from e
        return str(wikitext)

    def fetch_wikitext(self, title: str) -> str:
        """Return the raw wikitext of a page ("" if it does not exist)."""
        return self.fetch_policy.call(self._fetch_once, title)


class LexemeIndex:
    """Answers whether Wikidata already has a lexeme for a term.

    Answers are cached per (term, language) for the lifetime of the instance.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        api_url: str = WIKIDATA_API,
        policy: RetryPolicy | None = None,
    ) -> None:
        self.session = session or build_session()
        self.api_url = api_url
        self.policy = policy or RetryPolicy(LOOKUP_RETRY_DELAY)
        self._cache: dict[tuple[str, str], bool] = {}

    def _search_once(self, term: str, language: str) -> bool:
        params = {
            "action": "wbsearchentities",
            "search": term,
            "language": language,
            "limit": 1,
            "format": "json",
            "type": "lexeme",
            "maxlag": MAXLAG,
        }
        data = _get_json(self.session, self.api_url, params)
        results = data.get("search")
        if not isinstance(results, list):
            # Wikidata drops "search" when it is lagged or throttling us
            error = _api_error(data) or {}
            raise TransientServiceError(
                f"Lexeme search for {term!r} failed: {error.get('code', 'no results key')}"
            )
        return len(results) > 0

    def exists(self, term: str, language: str = "en") -> bool:
        key = (term, language)
        if key not in self._cache:
            self._cache[key] = self.policy.call(self._search_once, term, language)
        return self._cache[key]
