import base64

from pinmap.services.images import decoded_size, sanitize_image_data, to_data_url


def test_decoded_size_accounts_for_prefix_and_padding():
    for n in (0, 1, 2, 3, 10, 1001):
        raw = b"a" * n
        b64 = base64.b64encode(raw).decode()
        assert decoded_size(b64) == n
        assert decoded_size(f"data:image/jpeg;base64,{b64}") == n


def test_sanitize_drops_oversize_and_non_text():
    small = to_data_url(b"x" * 10, "image/png")
    assert sanitize_image_data(small, 10) == small
    assert sanitize_image_data(small, 9) is None
    assert sanitize_image_data(None, 10) is None
    assert sanitize_image_data(12345, 10) is None
    assert sanitize_image_data("", 10) is None


def test_to_data_url():
    assert to_data_url(b"hi", "image/png") == "data:image/png;base64,aGk="
