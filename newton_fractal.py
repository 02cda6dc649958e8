import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

import PIL.Image
import PIL.ImageDraw

from newton import (
    BASE_COLORS,
    FractalGenerator,
    Polynomial,
    SamplingGrid,
    resolve_palette,
    write_image,
)

from argparse import ArgumentParser, ArgumentTypeError

DEFAULT_COEFFICIENTS = (-1 + 0j, 0j, 0j, 0j, 1 + 0j)
MODE_SHADING = {"light": False, "dark": True}


@dataclass
class OutputConfig:
    modes: tuple[str, ...]
    paths: dict[str, Path]
    image_format: str


def _parse_complex(text: str) -> complex:
    compact = text.replace(" ", "")
    if compact.endswith("i"):
        compact = compact[:-1] + "j"
    try:
        return complex(compact)
    except ValueError as exc:
        raise ArgumentTypeError(f"'{text}' is not a complex number (expected e.g. 1, -2.5, 1+2j).") from exc


def build_parser():
    parser = ArgumentParser(description="Render the Newton fractal of a degree 3 to 5 complex polynomial.")

    parser.add_argument('--coeff', type=_parse_complex, dest='coefficients', action='append',
                        help='polynomial coefficient, lowest degree first. Repeat once per coefficient.',
                        metavar='COEFF')

    parser.add_argument('--roots', type=_parse_complex, nargs='+',
                        help='build the monic polynomial with these roots instead of giving coefficients',
                        metavar='ROOT')

    parser.add_argument('--origin-real', type=float,
                        dest='origin_real', help='real part of the top-left corner of the sampled square',
                        metavar='ORIGIN_REAL', default=-4.0)

    parser.add_argument('--origin-imag', type=float,
                        dest='origin_imag', help='imaginary part of the top-left corner of the sampled square',
                        metavar='ORIGIN_IMAG', default=4.0)

    parser.add_argument('--width', type=float,
                        dest='width', help='width of the sampled square in the complex plane',
                        metavar='WIDTH', default=8.0)

    parser.add_argument('--pixels', type=int,
                        dest='pixels', help='number of samples along each side of the image',
                        metavar='PIXELS', default=400)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of Newton steps per pixel',
                        metavar='MAX_ITERATIONS', default=20)

    parser.add_argument('--tolerance', type=float,
                        dest='tolerance', help='convergence and root matching tolerance',
                        metavar='TOLERANCE', default=1.0e-10)

    parser.add_argument('--mode', choices=['light', 'dark', 'both'], default='both',
                        help='"light" colors by root only, "dark" also darkens slow pixels, "both" writes one of each.')

    parser.add_argument('--output', dest='output', type=str,
                        help='Destination file for a single mode, or directory when --mode both is used.')

    parser.add_argument('--format', type=str,
                        dest='format', help='image file format. Can be any extension supported by Pillow. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('--background', type=str, default='#000000',
                        help='Hex color for pixels whose iteration did not converge.')

    parser.add_argument('--palette', nargs='+', metavar='COLOR',
                        help='matplotlib color names for the root colors, at least five.')

    parser.add_argument('--engine', choices=['python', 'tensorflow'], default='python',
                        help='"python" iterates pixel by pixel, "tensorflow" iterates the whole grid at once.')

    parser.add_argument('--mark-roots', dest='mark_roots', action='store_true',
                        help='draw a marker at every root found inside the image')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    image_format = (opt.format or "png").lstrip(".").lower()
    modes = ("light", "dark") if opt.mode == "both" else (opt.mode,)
    output_arg = getattr(opt, "output", None)
    paths: dict[str, Path] = {}

    if len(modes) == 1:
        mode = modes[0]
        if output_arg:
            output_path = Path(output_arg).expanduser()
            if output_path.exists() and output_path.is_dir():
                parser.error("--output must point to a file, not a directory, when a single mode is active.")
            suffix = output_path.suffix
            if suffix:
                if suffix.lower() != f".{image_format}":
                    parser.error(f"--output extension {suffix} does not match --format {image_format}.")
            else:
                output_path = output_path.with_suffix(f".{image_format}")
            paths[mode] = output_path.resolve()
        else:
            paths[mode] = Path(f"fractal-{mode}.{image_format}").resolve()
    else:
        base_dir = Path(output_arg).expanduser() if output_arg else Path.cwd()
        if base_dir.exists() and not base_dir.is_dir():
            parser.error("--output must be a directory when --mode both is used.")
        for mode in modes:
            paths[mode] = (base_dir / f"fractal-{mode}.{image_format}").resolve()

    return OutputConfig(modes=modes, paths=paths, image_format=image_format)


def _hex01(hex_color):
    hex_color = hex_color.lstrip('#')
    if len(hex_color) != 6:
        raise ValueError('background must be in the form #RRGGBB.')
    try:
        return tuple(int(hex_color[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
    except ValueError as exc:
        raise ValueError('background must contain only hexadecimal digits.') from exc


def mark_roots(image: PIL.Image.Image, grid: SamplingGrid, roots) -> PIL.Image.Image:
    """Draw a small marker over every root that falls inside ``grid``."""

    draw = PIL.ImageDraw.Draw(image)
    radius = max(3, int(round(grid.num_pixels * 0.01)))
    for root in roots:
        col = int(round((root.real - grid.origin.real) / grid.step))
        row = int(round((grid.origin.imag - root.imag) / grid.step))
        if not (0 <= col < grid.num_pixels and 0 <= row < grid.num_pixels):
            continue
        draw.ellipse(
            [(col - radius, row - radius), (col + radius, row + radius)],
            fill=(255, 255, 255),
            outline=(0, 0, 0),
            width=max(1, radius // 2),
        )
    return image


def build_polynomial(opt, parser: ArgumentParser) -> Polynomial:
    if opt.roots and opt.coefficients:
        parser.error("--roots cannot be combined with --coeff.")
    if opt.roots:
        return Polynomial.from_roots(opt.roots)
    return Polynomial(opt.coefficients or DEFAULT_COEFFICIENTS)


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)
    if VERBOSE:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    output_config = resolve_output_config(opt, parser)
    polynomial = build_polynomial(opt, parser)
    log("Polynomial: %s (degree %d)" % (polynomial, polynomial.degree()))

    if opt.palette:
        try:
            palette = resolve_palette(opt.palette)
        except ValueError as exc:
            parser.error(str(exc))
    else:
        palette = BASE_COLORS

    try:
        generator = FractalGenerator(
            polynomial,
            complex(opt.origin_real, opt.origin_imag),
            opt.width,
            num_pixels=opt.pixels,
            max_iterations=opt.max_iterations,
            tolerance=opt.tolerance,
            palette=palette,
        )
    except ValueError as exc:
        parser.error(str(exc))

    try:
        background = _hex01(opt.background)
    except ValueError:
        print(f"Invalid background '{opt.background}', defaulting to black.")
        background = (0.0, 0.0, 0.0)

    device = None
    if opt.engine == "tensorflow":
        gpus = tf.config.list_physical_devices('GPU')
        device = '/GPU:0' if gpus else '/CPU:0'
        log("Using %s" % device)

    written = []
    for mode in output_config.modes:
        generator.create_fractal(MODE_SHADING[mode], engine=opt.engine, device=device)
        output_path = output_config.paths[mode]
        if opt.mark_roots:
            image = mark_roots(generator.image.to_image(background), generator.grid, generator.roots)
            write_image(image, output_path, output_config.image_format)
        else:
            generator.save_fractal(output_path, background=background, image_format=output_config.image_format)
        log("Wrote %s" % output_path)
        written.append(output_path)

    print("Roots:", " ".join(generator.format_roots()))
    return written


if __name__ == '__main__':
    main()
