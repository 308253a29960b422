#!/usr/bin/env python3
"""
Capture one clean representative image (or thumbnail URL) for a web page.

Launches Chromium, navigates to ``--url``, runs the capture engine and writes
the outcome:

- a thumbnail URL is printed as JSON;
- an image is written to ``--output`` or uploaded to ``--gcs-bucket``.

Usage (examples)
----------------
python scripts/capture_page.py --url https://example.com/watch/123 --output out.png

python scripts/capture_page.py --url https://example.com --format jpeg --quality 85 \
  --custom-banner-selector "#popup-close" --inject-banner-css \
  --gcs-bucket your-capture-bucket --project-id your-gcp-project
"""
from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from dataclasses import dataclass

from google.cloud import storage  # type: ignore[attr-defined]
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..debug import debug_slug, ensure_debug_html, write_debug_log
from ..engine import produce_image_or_url
from ..errors import PageConnectionLost
from ..images import probe_image, sha256_hex
from ..logging import configure_logging, jlog, logging_context, pagelog, set_global_context
from ..metadata import build_capture_metadata
from ..models import DEFAULT_BANNER_TIMEOUT_MS, DEFAULT_CAPTURE_QUALITY, CaptureOptions, CaptureOutcome, UrlResult
from ..playwright import CHROMIUM_LAUNCH_ARGS, cleanup_playwright, sleep_ms, wait_assets_ready
from ..storage import canonical_capture_path, upload_capture
from ..versioning import get_engine_version
from ..video.extractors import DEFAULT_USER_AGENT

# ============================
# Constants & configuration
# ============================
DEFAULT_PROJECT_ID = os.getenv("GCP_PROJECT_ID")
DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080
DEFAULT_PAGE_TIMEOUT_MS = int(os.getenv("PAGE_TIMEOUT_MS", "30000"))
POST_NAVIGATION_SETTLE_MS = int(os.getenv("POST_NAVIGATION_SETTLE_MS", "1000"))
WAIT_UNTIL_CHOICES = ("load", "domcontentloaded", "networkidle", "commit")


@dataclass(frozen=True)
class CliArgs:
    url: str
    output: str | None
    gcs_bucket: str | None
    project_id: str | None
    width: int
    height: int
    format: str
    quality: int
    full_page: bool
    timeout_ms: int
    wait_until: str
    handle_banners: bool
    banner_timeout_ms: int
    custom_banner_selectors: tuple[str, ...]
    inject_banner_css: bool
    detect_video_thumbnails: bool
    user_agent: str
    debug_html: bool
    dry_run: bool

    def capture_options(self) -> CaptureOptions:
        return CaptureOptions(
            handle_banners=self.handle_banners,
            banner_timeout_ms=self.banner_timeout_ms,
            custom_banner_selectors=self.custom_banner_selectors,
            inject_banner_blocking_css=self.inject_banner_css,
            detect_video_thumbnails=self.detect_video_thumbnails,
            format=self.format,  # type: ignore[arg-type]
            quality=self.quality,
            full_page=self.full_page,
        )


def _bounded_int(lo: int, hi: int):
    def parse(value: str) -> int:
        number = int(value)
        if not lo <= number <= hi:
            raise argparse.ArgumentTypeError(f"must be between {lo} and {hi}")
        return number

    return parse


def parse_args(argv: list[str] | None = None) -> CliArgs:
    p = argparse.ArgumentParser(description="Capture a clean image or video thumbnail for a web page")
    p.add_argument("--url", required=True)
    p.add_argument("--output", help="Write the captured image to this path")
    p.add_argument("--gcs-bucket", help="Upload the captured image to this bucket instead of a local file")
    p.add_argument("--project-id", default=DEFAULT_PROJECT_ID)
    p.add_argument("--width", type=_bounded_int(100, 3840), default=DEFAULT_WIDTH)
    p.add_argument("--height", type=_bounded_int(100, 2160), default=DEFAULT_HEIGHT)
    p.add_argument("--format", choices=["png", "jpeg"], default="png")
    p.add_argument("--quality", type=_bounded_int(1, 100), default=DEFAULT_CAPTURE_QUALITY)
    p.add_argument("--full-page", action="store_true")
    p.add_argument(
        "--timeout-ms",
        type=_bounded_int(5000, 60000),
        default=DEFAULT_PAGE_TIMEOUT_MS,
        help="Navigation timeout (default from PAGE_TIMEOUT_MS env or 30000).",
    )
    p.add_argument("--wait-until", choices=WAIT_UNTIL_CHOICES, default="domcontentloaded")
    p.add_argument("--no-banners", action="store_true", help="Skip banner and overlay handling")
    p.add_argument(
        "--banner-timeout-ms",
        type=_bounded_int(1000, 30000),
        default=DEFAULT_BANNER_TIMEOUT_MS,
        help="Time budget for banner handling (default from BANNER_TIMEOUT_MS env or 5000).",
    )
    p.add_argument(
        "--custom-banner-selector",
        action="append",
        default=[],
        dest="custom_banner_selectors",
        help="Extra CSS selector to click if visible (repeatable).",
    )
    p.add_argument("--inject-banner-css", action="store_true", help="Inject CSS hiding known banner containers")
    p.add_argument("--no-video-detection", action="store_true", help="Always return a plain capture")
    p.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    p.add_argument("--debug-html", action="store_true", help="Dump page HTML and the diagnostic log to the debug directory.")
    p.add_argument("--dry-run", action="store_true", help="Do not write files or upload; only run the capture")

    ns = p.parse_args(argv)
    for selector in ns.custom_banner_selectors:
        if not selector or len(selector) > 200:
            p.error("each --custom-banner-selector must be 1-200 characters")

    return CliArgs(
        url=ns.url,
        output=ns.output,
        gcs_bucket=ns.gcs_bucket,
        project_id=ns.project_id,
        width=ns.width,
        height=ns.height,
        format=ns.format,
        quality=ns.quality,
        full_page=ns.full_page,
        timeout_ms=ns.timeout_ms,
        wait_until=ns.wait_until,
        handle_banners=not ns.no_banners,
        banner_timeout_ms=ns.banner_timeout_ms,
        custom_banner_selectors=tuple(ns.custom_banner_selectors),
        inject_banner_css=ns.inject_banner_css,
        detect_video_thumbnails=not ns.no_video_detection,
        user_agent=ns.user_agent,
        debug_html=ns.debug_html,
        dry_run=ns.dry_run,
    )


# ============================
# Output
# ============================


def _default_output(args: CliArgs) -> str:
    return f"capture.{'jpg' if args.format == 'jpeg' else 'png'}"


def emit_outcome(args: CliArgs, outcome: CaptureOutcome, *, storage_client=None) -> dict[str, object]:
    """Write or upload the outcome and return the JSON summary printed to stdout."""

    decision = outcome.decision
    thumbnail = outcome.detection.thumbnail if outcome.detection else None
    summary: dict[str, object] = {
        "url": args.url,
        "isVideoThumbnail": decision.is_video_thumbnail,
        "method": thumbnail.method if thumbnail else "none",
        "source": thumbnail.source if thumbnail else "unknown",
        "bannersHandled": list(outcome.banners_handled),
    }
    if isinstance(decision, UrlResult):
        summary["thumbnailUrl"] = decision.url
        return summary

    data = decision.data
    width, height = probe_image(data) or (0, 0)
    sha = sha256_hex(data)
    summary.update({"format": args.format, "width": width, "height": height, "sha256": sha, "bytes": len(data)})

    if args.gcs_bucket:
        client = storage_client or storage.Client(project=args.project_id)
        path = canonical_capture_path(args.gcs_bucket, sha, args.format)
        metadata = build_capture_metadata(
            source_url=args.url,
            is_video_thumbnail=decision.is_video_thumbnail,
            capture_method="thumbnail" if decision.is_video_thumbnail else "screenshot",
            image_format=args.format,
            width=width,
            height=height,
            sha256=sha,
            engine_version=get_engine_version(),
            thumbnail_url=thumbnail.url if thumbnail else None,
            thumbnail_source=thumbnail.source if thumbnail else None,
            banners_handled=len(outcome.banners_handled),
        )
        upload_capture(client, args.gcs_bucket, path, data, metadata, image_format=args.format, dry_run=args.dry_run)
        summary["gcsPath"] = path
        return summary

    path = args.output or _default_output(args)
    if args.dry_run:
        jlog("info", event="dry_run_write", path=path, bytes=len(data))
    else:
        with open(path, "wb") as fh:
            fh.write(data)
    summary["output"] = path
    return summary


# ============================
# Entrypoint
# ============================


async def capture_url(args: CliArgs) -> CaptureOutcome:
    """Launch a browser, load ``args.url`` and run the capture engine on it."""

    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=True, args=CHROMIUM_LAUNCH_ARGS)
        context = None
        try:
            try:
                context = await browser.new_context(
                    viewport={"width": args.width, "height": args.height},
                    user_agent=args.user_agent,
                )
                context.set_default_timeout(args.timeout_ms)
                page = await context.new_page()
                await page.goto(args.url, wait_until=args.wait_until, timeout=args.timeout_ms)
            except PlaywrightError as exc:
                raise PageConnectionLost(str(exc)) from exc

            await sleep_ms(POST_NAVIGATION_SETTLE_MS)
            await wait_assets_ready(page)
            pagelog("page_loaded", url=args.url, final_url=page.url)

            slug = debug_slug(args.url)
            if args.debug_html:
                await ensure_debug_html(page, slug)

            outcome = await produce_image_or_url(page, args.capture_options())
            if args.debug_html:
                write_debug_log(outcome.log, slug)
            return outcome
        finally:
            await cleanup_playwright(context, browser)


async def run(args: CliArgs) -> dict[str, object]:
    outcome = await capture_url(args)
    summary = emit_outcome(args, outcome)
    pagelog("capture_done", url=args.url, **{k: v for k, v in summary.items() if k != "url"})
    return summary


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments, run one capture and print its JSON summary."""

    configure_logging()
    set_global_context(app="thumbshot")
    with logging_context(engine_version=get_engine_version()):
        args = parse_args(argv)
        try:
            summary = asyncio.run(run(args))
        except PageConnectionLost as exc:
            jlog("error", event="capture_failed", url=args.url, error=str(exc), fatal=True)
            return 2
        except Exception as exc:
            jlog("error", event="capture_failed", url=args.url, error=repr(exc), fatal=False)
            return 1
    print(json.dumps(summary, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
