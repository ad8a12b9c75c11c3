import pytest

from invoice_maker.errors import CaptureError
from invoice_maker.utils.pdf.core.pagination import PageLayout, PageSlice, paginate, render_pages


def test_exactly_one_page():
    layout = paginate(210, 297)
    assert layout.page_count == 1
    assert layout.img_width_mm == pytest.approx(210)
    assert layout.img_height_mm == pytest.approx(297)
    assert layout.slices[0].vertical_offset_mm == 0


def test_overflow_below_tolerance_stays_on_one_page():
    layout = paginate(2100, 2985)  # 298.5 mm
    assert layout.page_count == 1


def test_overflow_at_tolerance_adds_a_page():
    layout = paginate(2100, 2990)  # 299 mm, 2 mm over
    assert layout.page_count == 2
    assert layout.slices[1].vertical_offset_mm == pytest.approx(-297)


def test_three_pages_with_offsets():
    layout = paginate(210, 599)
    assert layout.page_count == 3
    offsets = [page.vertical_offset_mm for page in layout.slices]
    assert offsets == pytest.approx([0, -297, -594])
    assert [page.page_index for page in layout.slices] == [0, 1, 2]


def test_image_width_is_scaled_to_page_width():
    layout = paginate(1588, 2246)
    assert layout.img_width_mm == pytest.approx(210)
    assert layout.img_height_mm == pytest.approx(2246 * 210 / 1588)
    assert layout.page_count == 1


def test_custom_tolerance():
    assert paginate(210, 298, tolerance_mm=2.0).page_count == 1
    assert paginate(210, 298, tolerance_mm=0.5).page_count == 2


@pytest.mark.parametrize("width, height", [(0, 100), (100, 0), (0, 0), (-5, 10)])
def test_empty_capture_raises(width, height):
    with pytest.raises(CaptureError):
        paginate(width, height)


def test_invalid_page_height():
    with pytest.raises(ValueError):
        paginate(210, 297, page_height_mm=0)


class RecordingWriter:
    def __init__(self):
        self.pages = 1
        self.calls = []

    def add_page(self):
        self.pages += 1

    def add_image_page(self, image_data, x, y, width, height):
        self.calls.append((self.pages, image_data, x, y, width, height))


def test_render_pages_draws_full_image_on_each_page():
    layout = PageLayout(210, 600, (PageSlice(0, 0.0), PageSlice(1, -297.0), PageSlice(2, -594.0)))
    writer = RecordingWriter()

    render_pages(writer, b"jpeg", layout)

    assert writer.pages == 3
    assert writer.calls == [
        (1, b"jpeg", 0, 0.0, 210, 600),
        (2, b"jpeg", 0, -297.0, 210, 600),
        (3, b"jpeg", 0, -594.0, 210, 600),
    ]
