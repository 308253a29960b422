import asyncio

from fakes import FakePage
from thumbshot.models import ThumbnailCandidate
from thumbshot.video.scoring import (
    MEASURE_IMAGE_JS,
    calculate_final_confidence,
    is_valid_thumbnail,
    measure_image,
    select_best_candidate,
    validate_candidates,
)


def _cand(url="https://x/a.jpg", source="og:image", confidence=0.8, width=None, height=None, method="metadata"):
    c = ThumbnailCandidate(url=url, source=source, confidence=confidence, method=method, width=width, height=height)
    if width and height:
        c.aspect_ratio = width / height
    return c


def _page_with_sizes(sizes, url="https://example.com/watch/1"):
    page = FakePage(url=url)
    page.on_script(MEASURE_IMAGE_JS, lambda arg: dict(zip(("width", "height"), sizes.get(arg["url"], (0, 0)))))
    return page


def test_minimum_size_rejects_small_images():
    assert not is_valid_thumbnail(_cand(width=199, height=720))
    assert not is_valid_thumbnail(_cand(width=1280, height=149))
    assert is_valid_thumbnail(_cand(width=200, height=150))


def test_unknown_dimensions_pass_size_check():
    assert is_valid_thumbnail(_cand())


def test_denylisted_url_fragments_are_rejected():
    for url in ("https://x/favicon.png", "https://x/img/Logo-big.jpg", "https://x/play-button.png", "https://x/user/avatar.jpg"):
        assert not is_valid_thumbnail(_cand(url=url, width=1280, height=720)), url


def test_tall_images_are_rejected():
    assert not is_valid_thumbnail(_cand(width=300, height=900))
    assert is_valid_thumbnail(_cand(width=600, height=800))


def test_scoring_bonuses():
    assert calculate_final_confidence(_cand(width=1280, height=720)) == 1.0
    assert calculate_final_confidence(_cand(source="container image", confidence=0.6, width=640, height=360)) == 0.75
    assert calculate_final_confidence(_cand(source="video poster", confidence=0.5, width=300, height=900)) == 0.65
    assert calculate_final_confidence(_cand(source="sibling image", confidence=0.5)) == 0.5


def test_scoring_stays_between_base_and_one():
    sizes = [(None, None), (200, 150), (640, 360), (1280, 720), (1000, 1000), (2000, 300)]
    sources = ["og:image", "video poster", "CSS background", "oEmbed"]
    for base in (0.5, 0.6, 0.7, 0.8, 0.9):
        for width, height in sizes:
            for source in sources:
                c = _cand(source=source, confidence=base, width=width, height=height)
                score = calculate_final_confidence(c)
                assert base <= score <= 1.0


def test_selector_empty_and_ties():
    assert select_best_candidate([]) is None
    first = _cand(url="https://x/1.jpg", confidence=0.9)
    second = _cand(url="https://x/2.jpg", confidence=0.9)
    low = _cand(url="https://x/0.jpg", confidence=0.5)
    assert select_best_candidate([low, first, second]) is first


def test_validation_resolves_measures_and_scores():
    page = _page_with_sizes({"https://example.com/media/a.jpg": (1280, 720)})
    c = _cand(url="/media/a.jpg")
    valid = asyncio.run(validate_candidates(page, [c]))
    assert valid == [c]
    assert c.url == "https://example.com/media/a.jpg"
    assert (c.width, c.height) == (1280, 720)
    assert round(c.aspect_ratio, 2) == 1.78
    assert c.confidence == 1.0


def test_validation_drops_unloadable_images():
    page = _page_with_sizes({})
    assert asyncio.run(validate_candidates(page, [_cand(url="https://x/missing.jpg")])) == []


def test_validation_keeps_reported_dimensions():
    page = _page_with_sizes({})
    c = _cand(source="oEmbed", width=480, height=360)
    assert asyncio.run(validate_candidates(page, [c])) == [c]
    assert MEASURE_IMAGE_JS not in page.evaluated


def test_validation_never_returns_undersized_candidates():
    sizes = {
        "https://x/1.jpg": (1280, 720),
        "https://x/2.jpg": (100, 80),
        "https://x/3.jpg": (640, 100),
        "https://x/4.jpg": (199, 400),
        "https://x/5.jpg": (800, 600),
    }
    page = _page_with_sizes(sizes)
    valid = asyncio.run(validate_candidates(page, [_cand(url=u) for u in sizes]))
    assert [c.url for c in valid] == ["https://x/1.jpg", "https://x/5.jpg"]
    assert all(c.width >= 200 and c.height >= 150 for c in valid)


def test_probe_error_drops_only_that_candidate():
    def measure(arg):
        if "bad" in arg["url"]:
            raise RuntimeError("evaluation failed")
        return {"width": 1280, "height": 720}

    page = FakePage()
    page.on_script(MEASURE_IMAGE_JS, measure)
    valid = asyncio.run(validate_candidates(page, [_cand(url="https://x/bad.jpg"), _cand(url="https://x/good.jpg")]))
    assert [c.url for c in valid] == ["https://x/good.jpg"]


class HangingMeasurePage(FakePage):
    """Image loads never settle, as with a server that accepts and stalls."""

    async def evaluate(self, script, arg=None):
        if script == MEASURE_IMAGE_JS:
            self.evaluated.append(script)
            await asyncio.get_running_loop().create_future()
        return await super().evaluate(script, arg)


def test_hung_measurement_reads_as_zero_by_zero():
    page = HangingMeasurePage()
    assert asyncio.run(measure_image(page, "https://x/slow.jpg", timeout_ms=10)) == (0, 0)


def test_hung_measurement_rejects_the_candidate():
    page = HangingMeasurePage()
    c = _cand(url="https://x/slow.jpg")
    assert asyncio.run(validate_candidates(page, [c], probe_timeout_ms=10)) == []
    assert (c.width, c.height) == (0, 0)
    assert page.evaluated == [MEASURE_IMAGE_JS]
