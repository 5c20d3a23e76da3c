import pytest

from store_service.slugs import to_slug


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Áo thun đỏ", "ao-thun-do"),
        ("iPhone 15 Pro Max", "iphone-15-pro-max"),
        ("  --Quần   Jean / Nam--  ", "quan-jean-nam"),
        ("Giày thể thao (2024)", "giay-the-thao-2024"),
    ],
)
def test_to_slug_normalizes_title(title, expected):
    assert to_slug(title) == expected


def test_to_slug_has_no_separator_at_the_ends_or_doubled():
    slug = to_slug("!!! Hello,,,   World ???")
    assert slug == "hello-world"
    assert "--" not in slug


def test_to_slug_is_deterministic_and_idempotent():
    title = "Váy Maxi Hoa Nhí — Bộ sưu tập Hè"
    slug = to_slug(title)
    assert to_slug(title) == slug
    assert to_slug(slug) == slug


def test_titles_differing_only_in_case_and_punctuation_share_a_slug():
    assert to_slug("Áo Khoác Gió") == to_slug("áo khoác  gió!")
