"""Playwright browser lifecycle with lease-count recycling.

One BrowserPool is opened per extractor run. Every ``acquire()`` is a lease
on the pooled page; after ``recycle_after`` leases the context is closed and
a fresh one opened, which keeps long flavour-lookup runs from accumulating
cookies and challenge state.
"""

import asyncio
from typing import Callable, Optional, Tuple

import structlog
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from nzsupps.config import settings
from nzsupps.core.exceptions import InterstitialError
from nzsupps.scrapers.utils.retry import (
    DEFAULT_INTERSTITIAL_WAIT,
    interstitial_retry,
    is_interstitial_title,
)
from nzsupps.scrapers.utils.user_agents import DEFAULT_USER_AGENT

logger = structlog.get_logger(__name__)


class BrowserPool:
    """Shared headless Chromium with one recyclable context and page.

    Use as an async context manager:

        async with BrowserPool() as pool:
            page = await pool.acquire()
    """

    def __init__(
        self,
        headless: Optional[bool] = None,
        recycle_after: Optional[int] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        locale: Optional[str] = None,
        timezone_id: Optional[str] = None,
        playwright_factory: Callable = async_playwright,
    ):
        self._headless = settings.BROWSER_HEADLESS if headless is None else headless
        self._recycle_after = recycle_after or settings.BROWSER_RECYCLE_AFTER
        self._user_agent = user_agent
        self._locale = locale or settings.BROWSER_LOCALE
        self._timezone_id = timezone_id or settings.BROWSER_TIMEZONE
        self._playwright_factory = playwright_factory

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._lock = asyncio.Lock()

        self.leases = 0  # since the current context was opened
        self.total_leases = 0
        self.recycles = 0

    async def __aenter__(self) -> "BrowserPool":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Launch the browser. Safe to call more than once."""
        async with self._lock:
            if self._browser:
                return
            self._playwright = await self._playwright_factory().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                args=[
                    "--disable-blink-features=AutomationControlled",
                    "--disable-dev-shm-usage",
                    "--no-sandbox",
                ],
            )
            logger.info("browser_started", headless=self._headless)

    async def acquire(self) -> Page:
        """Lease the pooled page, recycling the context when it is due."""
        if not self._browser:
            await self.start()

        async with self._lock:
            if self._context is None:
                await self._open_context()
            elif self.leases >= self._recycle_after:
                await self._close_context()
                await self._open_context()
                self.recycles += 1
                logger.info("browser_context_recycled", recycles=self.recycles)

            self.leases += 1
            self.total_leases += 1
            return self._page

    async def close(self) -> None:
        """Close the context, the browser and Playwright."""
        async with self._lock:
            await self._close_context()
            if self._browser:
                await self._browser.close()
                self._browser = None
            if self._playwright:
                await self._playwright.stop()
                self._playwright = None
            logger.info("browser_stopped", total_leases=self.total_leases)

    async def _open_context(self) -> None:
        self._context = await self._browser.new_context(
            user_agent=self._user_agent,
            locale=self._locale,
            timezone_id=self._timezone_id,
            viewport={"width": 1366, "height": 900},
        )
        await self._context.add_init_script(STEALTH_JS)
        self._page = await self._context.new_page()
        self.leases = 0

    async def _close_context(self) -> None:
        if self._context is None:
            return
        try:
            await self._context.close()
        except PlaywrightError as e:
            logger.warning("browser_context_close_failed", error=str(e))
        self._context = None
        self._page = None


async def goto_with_interstitial_retry(
    page: Page,
    url: str,
    *,
    wait_seconds: float = DEFAULT_INTERSTITIAL_WAIT,
    timeout_ms: Optional[int] = None,
    retry_timeout_ms: Optional[int] = None,
) -> None:
    """Navigate to url, waiting once and re-navigating if a challenge page shows.

    Raises:
        InterstitialError: If the challenge is still there after the retry
        playwright.async_api.Error: On navigation failure
    """
    timeout_ms = timeout_ms or settings.NAVIGATION_TIMEOUT_MS
    retry_timeout_ms = retry_timeout_ms or settings.RETRY_NAVIGATION_TIMEOUT_MS

    async for attempt in interstitial_retry(wait_seconds):
        with attempt:
            first = attempt.retry_state.attempt_number == 1
            await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=timeout_ms if first else retry_timeout_ms,
            )
            title = await page.title()
            if is_interstitial_title(title):
                raise InterstitialError(url, title)


def clean_option_texts(texts) -> Tuple[str, ...]:
    """Trim option labels, dropping blanks, placeholders and repeats."""
    seen = []
    for text in texts:
        label = (text or "").strip()
        if not label or label.lower() == "choose an option":
            continue
        if label not in seen:
            seen.append(label)
    return tuple(seen)


async def read_option_texts(
    page: Page,
    url: str,
    option_selector: str,
    *,
    wait_seconds: float = DEFAULT_INTERSTITIAL_WAIT,
    options_wait_ms: Optional[int] = None,
) -> Tuple[str, ...]:
    """Open a product page and read the labels of its variant options.

    Returns:
        Cleaned option labels, possibly empty
    """
    await goto_with_interstitial_retry(page, url, wait_seconds=wait_seconds)

    try:
        await page.wait_for_selector(
            option_selector,
            state="attached",
            timeout=options_wait_ms or settings.OPTIONS_WAIT_MS,
        )
    except PlaywrightError:
        # Products without variants never render the control
        logger.debug("options_not_attached", url=url, selector=option_selector)

    texts = await page.locator(option_selector).all_inner_texts()
    return clean_option_texts(texts)


# Minimal stealth JS to mask automation signals
STEALTH_JS = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['en-NZ', 'en'] });
window.chrome = { runtime: {} };
"""
