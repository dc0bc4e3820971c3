from playwright.sync_api import Error as PlaywrightError, sync_playwright

from iposcore.core.config import settings
from iposcore.core.errors import SourceFetchError
from iposcore.utils.helpers import human_delay


def get_html(url: str) -> str:
    """Render a listings/GMP page in headless Chromium and return its HTML."""
    try:
        with sync_playwright() as p:
            browser = p.chromium.launch(
                headless=True,
                args=["--disable-blink-features=AutomationControlled"]
            )

            context = browser.new_context(
                user_agent=(
                    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
                    "AppleWebKit/537.36 (KHTML, like Gecko) "
                    "Chrome/122.0.0.0 Safari/537.36"
                ),
                viewport={"width": 1366, "height": 768},
                locale="en-IN",
                timezone_id="Asia/Kolkata"
            )

            page = context.new_page()
            page.goto(url, timeout=settings.REQUEST_TIMEOUT * 1000)
            human_delay()

            html = page.content()

            browser.close()
            return html
    except PlaywrightError as e:
        raise SourceFetchError(url, str(e)) from e
