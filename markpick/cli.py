import argparse
import json
import logging
import os
import sys

import cv2

from .classify import is_empty
from .config import DEFAULT_CONFIG
from .core import analyze_batch
from .detect import segment_shapes
from .nms import suppress_duplicates
from .preprocess import threshold_stages, to_gray

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return n


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="markpick",
        description="Pick the candidate image that satisfies a mark-counting instruction.",
    )
    p.add_argument("instruction", nargs="?", default=None, help="Instruction markup (HTML or plain text).")
    p.add_argument("images", nargs="*", help="Candidate image paths, in order.")
    p.add_argument("--instruction-file", help="Read the instruction markup from this file instead.")
    p.add_argument("--out", help="Write the JSON report here as well as to stdout.")
    p.add_argument("--vis-dir", help="Write annotated copies of each image into this directory.")
    p.add_argument("--debug", action="store_true", help="Plot the threshold stages of every image.")
    p.add_argument("--workers", type=_positive_int, default=None, help="Thread pool size (default: one per image, max 8).")
    p.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...).")
    return p


def _write_visualizations(images, paths, report, vis_dir: str) -> None:
    from .visualize import draw_shapes_on_image

    os.makedirs(vis_dir, exist_ok=True)
    for img, path, res in zip(images, paths, report.results):
        if img is None:
            continue
        gray = to_gray(img)
        shapes = suppress_duplicates(segment_shapes(img, DEFAULT_CONFIG), DEFAULT_CONFIG.overlap_factor)
        flags = [is_empty(gray, s, DEFAULT_CONFIG) for s in shapes]
        label = f"#{res.index} {report.rule.subject}={res.metric} total={res.total_shapes}"
        if res.index == report.decision.selected_index:
            label += " <PICK>"
        vis = draw_shapes_on_image(img, shapes, flags, label=label)
        base = os.path.splitext(os.path.basename(path))[0]
        out_path = os.path.join(vis_dir, f"{res.index:02d}_{base}.png")
        if not cv2.imwrite(out_path, vis):
            raise RuntimeError(f"Failed to write image: {out_path}")
        logger.info("Wrote visualization to: %s", out_path)


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    instruction = args.instruction
    paths = list(args.images)
    if args.instruction_file:
        with open(args.instruction_file, "r", encoding="utf-8") as f:
            # positional "instruction" was really the first image path
            if instruction is not None:
                paths.insert(0, instruction)
            instruction = f.read()

    if not paths:
        print('Usage: markpick "<instruction>" image1.png image2.png ...', file=sys.stderr)
        return 2

    images = []
    for path in paths:
        img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
        if img is None:
            logger.warning("Cannot read image: %s", path)
        images.append(img)

    if args.debug:
        from .visualize import show_threshold_stages
        for path, img in zip(paths, images):
            if img is not None:
                show_threshold_stages(threshold_stages(to_gray(img), DEFAULT_CONFIG), title=path)

    report = analyze_batch(images, instruction, max_workers=args.workers)
    payload = report.to_dict()
    payload["images"] = paths

    text = json.dumps(payload, ensure_ascii=False, indent=2)
    print(text)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info("Wrote JSON to: %s", args.out)

    if args.vis_dir:
        _write_visualizations(images, paths, report, args.vis_dir)

    return 0


if __name__ == "__main__":
    sys.exit(main())
