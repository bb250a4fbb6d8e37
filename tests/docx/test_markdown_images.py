from feishu_docx.markdown_images import extract_image_urls, image_filename


def test_extracts_http_urls_in_source_order_with_duplicates():
    markdown = """
# Report

![chart](https://example.com/a.png)

Some text ![](http://example.com/b.jpg) and again ![chart](https://example.com/a.png)
"""
    assert extract_image_urls(markdown) == [
        "https://example.com/a.png",
        "http://example.com/b.jpg",
        "https://example.com/a.png",
    ]


def test_drops_local_and_non_http_references():
    markdown = "![local](./img/a.png) ![abs](/tmp/b.png) ![data](data:image/png;base64,xx) ![ftp](ftp://x/y.png)"
    assert extract_image_urls(markdown) == []


def test_trims_whitespace_around_url():
    assert extract_image_urls("![a](  https://example.com/x.png  )") == ["https://example.com/x.png"]


def test_ignores_plain_links():
    assert extract_image_urls("[not an image](https://example.com/page)") == []


def test_every_url_is_network_reachable():
    markdown = "![a](https://h/1.png) ![b](file.png) ![c](http://h/2.png) ![d](C:/x.png)"
    urls = extract_image_urls(markdown)
    assert urls == ["https://h/1.png", "http://h/2.png"]
    assert all(u.startswith(("http://", "https://")) for u in urls)


def test_empty_markdown():
    assert extract_image_urls("") == []


def test_image_filename():
    assert image_filename("https://example.com/path/photo.jpg?size=large", 0) == "photo.jpg"
    assert image_filename("https://example.com/", 3) == "image_3.png"
    assert image_filename("https://example.com", 1) == "image_1.png"
