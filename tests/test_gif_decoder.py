from __future__ import annotations

from pathlib import Path

from PIL import Image

from yupic.decode.gif_decoder import MAX_ANIMATION_FRAMES, GifDecoder, delay_to_ms


def write_gif(path: Path, n_frames: int, duration: int = 50, size: tuple[int, int] = (4, 4)) -> Path:
    # Consecutive frames must differ or Pillow merges them on save.
    frames = [Image.new("RGB", size, (i % 256, (i // 256) * 100, 0)) for i in range(n_frames)]
    frames[0].save(path, save_all=True, append_images=frames[1:], duration=duration, loop=0)
    return path


def test_delay_floor_applies_to_zero_over_zero() -> None:
    assert delay_to_ms(0, 0) == 10


def test_delay_keeps_reasonable_values() -> None:
    assert delay_to_ms(50, 1) == 50
    assert delay_to_ms(100, 0) == 100


def test_delay_rounds_then_floors() -> None:
    assert delay_to_ms(101, 2) == 51
    assert delay_to_ms(5, 1) == 10
    assert delay_to_ms(7, 0) == 10
    assert delay_to_ms(19, 2) == 10


def test_gif_decode_frames_and_delays(tmp_path: Path) -> None:
    path = write_gif(tmp_path / "anim.gif", n_frames=3, duration=80)

    frames, fmt = GifDecoder().decode(path)
    assert fmt == "gif"
    assert len(frames) == 3
    for frame in frames:
        assert frame.delay_ms == 80
        assert len(frame.pixels) == frame.width * frame.height * 4


def test_gif_decode_truncates_long_animations(tmp_path: Path) -> None:
    path = write_gif(tmp_path / "long.gif", n_frames=MAX_ANIMATION_FRAMES + 5, duration=20)

    frames, _ = GifDecoder().decode(path)
    assert len(frames) == MAX_ANIMATION_FRAMES


def test_gif_decode_resizes_every_frame(tmp_path: Path) -> None:
    path = write_gif(tmp_path / "wide.gif", n_frames=2, size=(40, 20))

    frames, _ = GifDecoder().decode(path, max_dimension=10)
    assert [(f.width, f.height) for f in frames] == [(10, 5), (10, 5)]
