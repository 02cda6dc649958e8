import PIL.Image
import pytest

import newton_fractal


def test_single_mode_writes_requested_file(tmp_path, capsys):
    output = tmp_path / "quartic.png"
    written = newton_fractal.main(["--pixels", "32", "--mode", "light", "--output", str(output)])

    assert written == [output.resolve()]
    with PIL.Image.open(output) as image:
        assert image.size == (32, 32)
    roots_line = capsys.readouterr().out.strip().splitlines()[-1]
    assert roots_line.startswith("Roots:")
    assert len(roots_line.split()) == 5


def test_both_modes_write_light_and_dark(tmp_path):
    written = newton_fractal.main(["--pixels", "24", "--output", str(tmp_path), "--mark-roots"])
    assert [p.name for p in written] == ["fractal-light.png", "fractal-dark.png"]
    assert all(p.exists() for p in written)


def test_roots_option_and_tensorflow_engine(tmp_path):
    output = tmp_path / "cubic"
    written = newton_fractal.main(
        [
            "--roots", "1", "1i", "-1",
            "--origin-real", "-2", "--origin-imag", "2", "--width", "4",
            "--pixels", "20", "--mode", "dark", "--engine", "tensorflow",
            "--output", str(output),
        ]
    )
    assert written[0].suffix == ".png"
    assert written[0].exists()


@pytest.mark.parametrize(
    "argv",
    [
        ["--coeff", "-1", "--coeff", "0", "--coeff", "1"],
        ["--coeff", "abc"],
        ["--roots", "1", "2", "3", "--coeff", "1"],
        ["--mode", "light", "--output", "x.jpg"],
        ["--width", "-1"],
        ["--palette", "red", "green"],
    ],
)
def test_invalid_arguments_exit(argv, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        newton_fractal.main(["--pixels", "8", *argv])
    assert excinfo.value.code == 2


def test_invalid_background_falls_back_to_black(tmp_path, capsys):
    output = tmp_path / "bg.png"
    newton_fractal.main(["--pixels", "20", "--mode", "light", "--background", "zzz", "--output", str(output)])
    assert "defaulting to black" in capsys.readouterr().out
    with PIL.Image.open(output) as image:
        assert image.getpixel((10, 10)) == (0, 0, 0)


def test_mark_roots_draws_at_root_pixels():
    grid = newton_fractal.SamplingGrid(-4 + 4j, 8.0)
    blank = PIL.Image.new("RGB", (400, 400), (0, 0, 0))

    marked = newton_fractal.mark_roots(blank.copy(), grid, [1 + 0j, -1 + 0j, 1j, -1j])
    assert marked.getpixel((250, 200)) == (255, 255, 255)
    assert marked.getpixel((150, 200)) == (255, 255, 255)
    assert marked.getpixel((200, 150)) == (255, 255, 255)
    assert marked.getpixel((200, 250)) == (255, 255, 255)
    assert marked.getpixel((200, 200)) == (0, 0, 0)

    single = newton_fractal.mark_roots(blank.copy(), grid, [1 + 0j])
    with_outside = newton_fractal.mark_roots(blank.copy(), grid, [1 + 0j, 10 + 10j, -4.5 + 0j])
    assert single.tobytes() == with_outside.tobytes()
    assert single.tobytes() != blank.tobytes()
