from thumbshot.urls import is_cdn_thumbnail_url, is_embed_src, resolve_url


def test_resolve_url_handles_relative_and_protocol_relative():
    base = "https://example.com/watch/1"
    assert resolve_url(base, "poster.png") == "https://example.com/watch/poster.png"
    assert resolve_url(base, "/img/a.jpg") == "https://example.com/img/a.jpg"
    assert resolve_url(base, "//cdn.example.net/a.jpg") == "https://cdn.example.net/a.jpg"
    assert resolve_url(base, "https://other.example/a.jpg") == "https://other.example/a.jpg"


def test_resolve_url_without_base_returns_input():
    assert resolve_url(None, "poster.png") == "poster.png"


def test_is_embed_src_matches_known_players():
    assert is_embed_src("https://www.youtube.com/embed/abc")
    assert is_embed_src("https://player.vimeo.com/video/1")
    assert is_embed_src("https://cdn.example.com/EMBED/x")
    assert not is_embed_src("https://ads.example.com/frame.html")
    assert not is_embed_src(None)


def test_is_cdn_thumbnail_url():
    assert is_cdn_thumbnail_url("https://i.ytimg.com/vi/abc/maxresdefault.jpg")
    assert is_cdn_thumbnail_url("https://i3.ytimg.com/vi_webp/abc/hqdefault.webp")
    assert is_cdn_thumbnail_url("https://img.youtube.com/vi/abc/0.jpg")
    assert is_cdn_thumbnail_url("https://i.vimeocdn.com/video/123_640.jpg")
    assert is_cdn_thumbnail_url("https://s2.dmcdn.net/v/ABC/x720")
    assert is_cdn_thumbnail_url("https://www.dailymotion.com/thumbnail/video/x8abc")
    assert not is_cdn_thumbnail_url("https://example.com/vi/abc.jpg")
    assert not is_cdn_thumbnail_url("https://evil.example/?u=https://i.ytimg.com/vi/a.jpg")
    assert not is_cdn_thumbnail_url("")
