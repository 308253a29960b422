import asyncio
from io import BytesIO

import pytest
from fakes import FakeElement, FakePage
from PIL import Image
from thumbshot import engine
from thumbshot.engine import is_direct_thumbnail, produce_image_or_url
from thumbshot.errors import PageConnectionLost
from thumbshot.models import CaptureOptions, ImageResult, ThumbnailCandidate, UrlResult
from thumbshot.video.crop import VIDEO_REGION_JS
from thumbshot.video.detector import VIDEO_PRESENCE_JS
from thumbshot.video.extractors import DOM_TRAVERSAL_JS, METADATA_JS, VIDEO_ELEMENTS_JS
from thumbshot.video.scoring import MEASURE_IMAGE_JS

REGION = {"x": 10, "y": 120, "width": 1280, "height": 720}


def _png(width=640, height=360) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), (20, 40, 60)).save(buf, format="PNG")
    return buf.getvalue()


def _measure(sizes):
    return lambda arg: dict(zip(("width", "height"), sizes.get(arg["url"], (0, 0))))


def _container_image_page(url="https://example.com/media/still.jpg", size=(640, 360)):
    page = FakePage()
    page.on_script(DOM_TRAVERSAL_JS, [{"url": url, "kind": "container", "element": "div.player img"}])
    page.on_script(MEASURE_IMAGE_JS, _measure({url: size}))
    return page


def test_og_image_is_returned_as_url():
    page = FakePage()
    page.on_script(METADATA_JS, {"og": "https://x/a.jpg", "twitter": None, "ldjson": []})
    page.on_script(MEASURE_IMAGE_JS, _measure({"https://x/a.jpg": (1280, 720)}))
    outcome = asyncio.run(produce_image_or_url(page))
    assert outcome.decision == UrlResult(url="https://x/a.jpg", is_video_thumbnail=True)
    assert outcome.detection.thumbnail.confidence == 1.0
    assert outcome.detection.thumbnail.method == "metadata"
    assert page.screenshots == []


def test_small_poster_falls_back_to_video_crop():
    page = FakePage()
    page.on_script(VIDEO_ELEMENTS_JS, [{"index": 0, "poster": "poster.png", "data": {}}])
    page.on_script(MEASURE_IMAGE_JS, _measure({"https://example.com/watch/poster.png": (100, 80)}))
    page.on_script(VIDEO_PRESENCE_JS, True)
    page.on_script(VIDEO_REGION_JS, REGION)
    outcome = asyncio.run(produce_image_or_url(page))
    assert outcome.decision == ImageResult(data=b"clip-capture", is_video_thumbnail=True)
    assert outcome.detection.has_video is True
    assert outcome.detection.candidates == []
    assert page.screenshots == [{"clip": REGION, "type": "png"}]


def test_plain_page_gets_plain_capture():
    page = FakePage()
    outcome = asyncio.run(produce_image_or_url(page))
    assert outcome.decision == ImageResult(data=b"full-capture", is_video_thumbnail=False)
    assert outcome.banners_handled == []
    assert outcome.detection.has_video is False
    assert page.screenshots == [{"full_page": False, "type": "png"}]
    assert outcome.log[-1] == "Falling back to plain capture"


def test_detection_disabled_skips_video_steps():
    page = FakePage()
    page.on_script(METADATA_JS, {"og": "https://x/a.jpg"})
    options = CaptureOptions(detect_video_thumbnails=False, format="jpeg", quality=70, full_page=True)
    outcome = asyncio.run(produce_image_or_url(page, options))
    assert outcome.decision == ImageResult(data=b"full-capture", is_video_thumbnail=False)
    assert outcome.detection is None
    assert METADATA_JS not in page.evaluated
    assert page.screenshots == [{"full_page": True, "type": "jpeg", "quality": 70}]


def test_banners_are_handled_before_capture():
    close = FakeElement(hide_on_click=True)
    popup = FakeElement()
    page = FakePage(elements={".modal-close": close, "#popup-close": popup})
    options = CaptureOptions(custom_banner_selectors=("#popup-close",), inject_banner_blocking_css=True)
    outcome = asyncio.run(produce_image_or_url(page, options))
    assert outcome.banners_handled == ["Modal Close", "custom:#popup-close"]
    assert close.clicks == 1
    assert popup.clicks == 1
    assert len(page.styles) == 1


def test_banner_handling_can_be_disabled():
    close = FakeElement()
    page = FakePage(elements={".modal-close": close})
    outcome = asyncio.run(produce_image_or_url(page, CaptureOptions(handle_banners=False)))
    assert outcome.banners_handled == []
    assert close.clicks == 0
    assert page.queries == []


def test_low_confidence_candidate_is_downloaded(monkeypatch):
    fetched = []

    def fake_fetch(url, referer=None, **kwargs):
        fetched.append((url, referer))
        return _png()

    monkeypatch.setattr(engine, "fetch_image_bytes", fake_fetch)
    page = _container_image_page()
    outcome = asyncio.run(produce_image_or_url(page))
    assert isinstance(outcome.decision, ImageResult)
    assert outcome.decision.is_video_thumbnail is True
    with Image.open(BytesIO(outcome.decision.data)) as im:
        assert im.format == "PNG"
        assert im.size == (640, 360)
    assert fetched == [("https://example.com/media/still.jpg", "https://example.com/watch/1")]
    assert outcome.detection.thumbnail.confidence == 0.75


def test_failed_download_falls_back_to_crop(monkeypatch):
    def fake_fetch(url, referer=None, **kwargs):
        return b"<html>not an image</html>"

    monkeypatch.setattr(engine, "fetch_image_bytes", fake_fetch)
    page = _container_image_page()
    page.on_script(VIDEO_REGION_JS, REGION)
    outcome = asyncio.run(produce_image_or_url(page))
    assert outcome.decision == ImageResult(data=b"clip-capture", is_video_thumbnail=True)


def test_failed_download_and_crop_fall_back_to_plain_capture(monkeypatch):
    def fake_fetch(url, referer=None, **kwargs):
        raise OSError("timed out")

    monkeypatch.setattr(engine, "fetch_image_bytes", fake_fetch)
    outcome = asyncio.run(produce_image_or_url(_container_image_page()))
    assert outcome.decision == ImageResult(data=b"full-capture", is_video_thumbnail=False)


def test_video_without_region_falls_back_to_plain_capture():
    page = FakePage()
    page.on_script(VIDEO_PRESENCE_JS, True)
    outcome = asyncio.run(produce_image_or_url(page))
    assert outcome.detection.has_video is True
    assert outcome.decision == ImageResult(data=b"full-capture", is_video_thumbnail=False)


def test_crop_error_falls_back_to_plain_capture():
    class FlakyClipPage(FakePage):
        async def screenshot(self, **kwargs):
            if "clip" in kwargs:
                raise RuntimeError("Clipped area is either empty or outside the resulting image")
            return await super().screenshot(**kwargs)

    page = FlakyClipPage()
    page.on_script(VIDEO_PRESENCE_JS, True)
    page.on_script(VIDEO_REGION_JS, REGION)
    outcome = asyncio.run(produce_image_or_url(page))
    assert outcome.decision == ImageResult(data=b"full-capture", is_video_thumbnail=False)


def test_closed_page_raises_connection_lost():
    with pytest.raises(PageConnectionLost):
        asyncio.run(produce_image_or_url(FakePage(closed=True)))


def test_closed_page_raises_even_without_banner_handling():
    options = CaptureOptions(handle_banners=False)
    with pytest.raises(PageConnectionLost):
        asyncio.run(produce_image_or_url(FakePage(closed=True), options))


def test_direct_thumbnail_rules():
    def cand(url="https://x/a.jpg", source="container image", confidence=0.6):
        return ThumbnailCandidate(url=url, source=source, confidence=confidence, method="m")

    assert is_direct_thumbnail(cand(source="oEmbed", confidence=0.5))
    assert is_direct_thumbnail(cand(source="schema.org VideoObject", confidence=0.5))
    assert is_direct_thumbnail(cand(confidence=0.8))
    assert is_direct_thumbnail(cand(url="https://i.ytimg.com/vi/abc123/hqdefault.jpg"))
    assert is_direct_thumbnail(cand(url="https://i.vimeocdn.com/video/123_640.jpg"))
    assert is_direct_thumbnail(cand(url="https://s1.dmcdn.net/v/ABC/x720"))
    assert not is_direct_thumbnail(cand())
