# dealscout/browser/worker.py

"""Process-isolated rendering: one subprocess and one browser per call.

The parent sends a JSON task on the child's stdin and reads one JSON
message back from its stdout::

    task:    {"platform": "jumia", "url": "...", "selector": "..."}
    reply:   {"platform": "jumia", "html": "<html>..."}
         or  {"platform": "jumia", "error": "Navigation timeout"}

A hang or crash inside the child is contained: the parent enforces
its own deadline and kills the process.
"""

import asyncio
import json
import logging
import os
import sys
import time
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Route, sync_playwright

from dealscout.browser.interception import should_block
from dealscout.config.logging_config import setup_logging
from dealscout.config.settings import Settings
from dealscout.errors import RenderError

logger = logging.getLogger("dealscout.browser.worker")


def _route_handler(route: Route) -> None:
    request = route.request
    if should_block(request.resource_type, request.url):
        route.abort()
    else:
        route.continue_()


def run_task(task: dict[str, Any]) -> dict[str, Any]:
    """Render one page in a private browser and return the reply message.

    Runs inside the child process. Never raises: errors are reported
    in the ``error`` key so the parent always gets a message.
    """
    settings = Settings()
    platform = str(task.get("platform", ""))
    url = str(task["url"])
    selector = task.get("selector")
    nav_timeout_ms = float(
        task.get("navigation_timeout", settings.NAVIGATION_TIMEOUT)
    ) * 1000

    try:
        with sync_playwright() as pw:
            browser = pw.chromium.launch(
                headless=True, args=list(settings.BROWSER_ARGS)
            )
            try:
                context = browser.new_context(
                    user_agent=settings.USER_AGENT
                )
                context.route("**/*", _route_handler)
                page = context.new_page()
                page.set_default_navigation_timeout(nav_timeout_ms)
                page.goto(url, wait_until="domcontentloaded")
                if selector:
                    try:
                        page.wait_for_selector(
                            selector,
                            timeout=settings.SELECTOR_TIMEOUT * 1000,
                        )
                    except PlaywrightError:
                        logger.warning(
                            "[%s] Selector not found, using page content anyway",
                            platform,
                        )
                time.sleep(settings.SETTLE_DELAY)
                html = page.content()
            finally:
                browser.close()
    except Exception as exc:
        return {"platform": platform, "error": str(exc) or type(exc).__name__}

    return {"platform": platform, "html": html}


class IsolatedBrowserWorker:
    """Render pages in throwaway subprocesses instead of a shared browser.

    Each :meth:`invoke` launches ``python -m dealscout.browser.worker``,
    so a wedged or crashed render cannot affect other platforms. The
    trade-off is a full browser start-up per call.
    """

    def __init__(
        self,
        timeout: float | None = None,
        python_path: str | None = None,
    ) -> None:
        self.settings = Settings()
        self.timeout = timeout or self.settings.WORKER_TIMEOUT
        self.python_path = python_path or sys.executable

    async def invoke(self, task: dict[str, Any]) -> dict[str, Any]:
        """Run *task* in a fresh worker process and return its reply."""
        platform = str(task.get("platform", ""))
        process = await asyncio.create_subprocess_exec(
            self.python_path,
            "-m",
            "dealscout.browser.worker",
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(json.dumps(task).encode("utf-8")),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, asyncio.CancelledError) as exc:
            process.kill()
            await process.wait()
            if isinstance(exc, asyncio.CancelledError):
                logger.info("[%s] Worker killed on cancellation", platform)
                raise
            return {
                "platform": platform,
                "error": f"Worker timed out after {self.timeout:.0f}s",
            }

        if stderr:
            logger.debug(
                "[%s] worker stderr: %s",
                platform,
                stderr.decode("utf-8", errors="replace").strip(),
            )

        lines = stdout.decode("utf-8", errors="replace").strip().splitlines()
        if not lines:
            return {
                "platform": platform,
                "error": f"Worker exited with code {process.returncode} "
                "and no reply",
            }
        try:
            reply: dict[str, Any] = json.loads(lines[-1])
        except json.JSONDecodeError as exc:
            return {"platform": platform, "error": f"Bad worker reply: {exc}"}
        return reply

    async def render(
        self,
        url: str,
        wait_selector: str | None = None,
        platform: str = "",
    ) -> str:
        """Render *url* in an isolated worker or raise :class:`RenderError`."""
        reply = await self.invoke(
            {"platform": platform, "url": url, "selector": wait_selector}
        )
        if "error" in reply:
            raise RenderError(str(reply["error"]))
        return str(reply.get("html", ""))

    async def shutdown(self) -> None:
        """Nothing shared to close; each worker tears down its own browser."""


def main() -> int:
    """Worker process entry point: read a task, print one reply."""
    setup_logging(prefix=f"worker_{os.getpid()}")
    try:
        task: dict[str, Any] = json.loads(sys.stdin.read())
    except json.JSONDecodeError as exc:
        print(json.dumps({"error": f"Bad task: {exc}"}))
        return 2
    reply = run_task(task)
    sys.stdout.write(json.dumps(reply) + "\n")
    sys.stdout.flush()
    return 0 if "html" in reply else 1


if __name__ == "__main__":
    sys.exit(main())
