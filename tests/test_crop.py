import asyncio

from fakes import FakePage
from thumbshot.models import CaptureOptions
from thumbshot.video.crop import VIDEO_REGION_JS, capture_video_region, find_video_region


def test_region_box_is_viewport_relative():
    # page.screenshot(clip=...) without full_page adds the scroll offset itself
    assert "scrollX" not in VIDEO_REGION_JS
    assert "scrollY" not in VIDEO_REGION_JS
    assert "x: Math.round(rect.x)" in VIDEO_REGION_JS
    assert "y: Math.round(rect.y)" in VIDEO_REGION_JS


def test_region_is_passed_unchanged_as_viewport_clip():
    page = FakePage()
    page.on_script(VIDEO_REGION_JS, {"x": 0, "y": 100.4, "width": 1280, "height": 720})
    data = asyncio.run(capture_video_region(page, CaptureOptions(format="jpeg", quality=90, full_page=True)))
    assert data == b"clip-capture"
    assert page.screenshots == [{"clip": {"x": 0, "y": 100, "width": 1280, "height": 720}, "type": "jpeg", "quality": 90}]
    assert "full_page" not in page.screenshots[0]


def test_empty_region_is_ignored():
    page = FakePage()
    page.on_script(VIDEO_REGION_JS, {"x": 0, "y": 0, "width": 0, "height": 480})
    assert asyncio.run(find_video_region(page)) is None
    assert asyncio.run(capture_video_region(page)) is None
    assert page.screenshots == []


def test_region_thresholds_are_passed_to_the_page():
    seen = []
    page = FakePage()
    page.on_script(VIDEO_REGION_JS, lambda arg: seen.append(arg))
    assert asyncio.run(find_video_region(page)) is None
    assert seen == [{"minWidth": 300, "minHeight": 200, "minAspect": 1.3, "maxAspect": 2.5}]
