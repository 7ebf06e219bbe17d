from lunch_calendar.share import PROJECT_URL, qr_png


def test_qr_png_is_png():
    png = qr_png(PROJECT_URL)
    assert png.startswith(b"\x89PNG\r\n\x1a\n")


def test_larger_box_size_gives_larger_image():
    assert len(qr_png("https://example.org", box_size=8)) > len(qr_png("https://example.org", box_size=2))
