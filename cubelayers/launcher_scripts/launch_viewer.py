'''
Author: Elia Savino
github: github.com/EliaSavino

Happy Hacking!

Descr: Build a puzzle, apply scripted turns instantly, then animate more turns.

'''
#!/usr/bin/env python3
import argparse
import logging

from cubelayers.config import PuzzleConfig, PuzzleSize
from cubelayers.logging_config import setup_logging
from cubelayers.puzzle import RubiksCube


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("View layer turns on a 2x2x2 or 3x3x3 puzzle")
    p.add_argument("--size", type=int, default=3, choices=[s.value for s in PuzzleSize])
    p.add_argument("--select", type=int, default=0, help="id of the reference cube")
    p.add_argument("--scripted", nargs="*", default=[], help="turns applied without animation (keys or names)")
    p.add_argument("--moves", nargs="*", default=[], help="turns to animate (keys or names)")
    p.add_argument("--no-core", action="store_true", dest="no_core", help="leave out the hidden centre cube")
    p.add_argument("--tween-ms", type=int, default=300, dest="tween_ms")
    p.add_argument("--fps", type=int, default=30)
    p.add_argument("--out", type=str, default=None, help=".gif or .mp4 to save instead of showing")
    p.add_argument("--debug", action="store_true")
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO)

    cfg = PuzzleConfig(include_core=not args.no_core, tween_ms=args.tween_ms, fps=args.fps)
    puzzle = RubiksCube(args.size, cfg)
    puzzle.select_reference(args.select)
    puzzle.apply_sequence(args.scripted, no_animation=True)

    # matplotlib is only needed for viewing
    from cubelayers.visualisation.animator import CubeAnimator

    animator = CubeAnimator(puzzle)
    animator.queue(args.moves)
    result = animator.animate(outfile=args.out)
    print(puzzle.get_history())
    return result


if __name__ == "__main__":
    main()
