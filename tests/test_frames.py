from __future__ import annotations

from PIL import Image

from lvmcollector.frames import image_to_bgra, load_frame


def test_image_channels_are_swapped_to_bgra() -> None:
    image = Image.new("RGB", (1, 1), (255, 0, 0))
    assert image_to_bgra(image, (1, 1)) == b"\x00\x00\xff\xff"


def test_image_is_resized_to_record_resolution(tmp_path) -> None:
    path = tmp_path / "shot.png"
    Image.new("RGB", (7, 5), (10, 20, 30)).save(path)
    data = load_frame(path, (4, 2))
    assert len(data) == 4 * 2 * 4
    assert data[:4] == b"\x1e\x14\x0a\xff"


def test_raw_frame_is_read_verbatim(tmp_path) -> None:
    path = tmp_path / "frame.BGRA"
    path.write_bytes(b"\x01\x02\x03")
    assert load_frame(path, (1280, 720)) == b"\x01\x02\x03"
