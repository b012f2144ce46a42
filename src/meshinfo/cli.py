#!/usr/bin/env python3
"""
CLI tool for mesh hole filling and volume analysis.

Usage:
    meshinfo input.obj output.obj
    meshinfo input.obj --analyze-only --density 7.85
"""

import argparse
import logging
import sys
from pathlib import Path

from meshinfo import EngineSettings, analyze, fill_holes
from meshinfo.io import load_mesh, save_mesh

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 2


def _drive(task, verbose):
    """Run a task, logging phase changes. Ctrl-C cancels it cooperatively."""
    last_phase = None
    try:
        for report in task:
            if verbose and report.phase != last_phase:
                logging.info(f"{task.name}: {report.phase} ({report.progress * 100:.1f}%)")
                last_phase = report.phase
    except KeyboardInterrupt:
        task.cancel()
        for _ in task:
            pass
    return task.result


def print_analysis(result, density):
    print(f"  Vertices: {result.num_vertices} ({result.num_welded_vertices} after welding)")
    print(f"  Triangles: {result.num_triangles}")
    print(f"  Closed: {result.is_closed}")
    if result.is_closed:
        print(f"  Volume: {result.volume:.4f}")
        print(f"  Mass: {result.mass(density):.2f} (density {density})")
    else:
        print(f"  Open edges: {result.num_open_edges}")
    if result.issues:
        print("  Issues:")
        for issue in result.issues:
            print(f"    - {issue}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Fill holes in triangle meshes and measure their volume",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Close all holes and check the result
  meshinfo part_with_holes.obj part_closed.obj

  # Only check closure and report volume and mass
  meshinfo part.obj --analyze-only --density 2.7

  # Fill without welding duplicate vertices first
  meshinfo input.obj output.obj --no-weld
        """
    )

    parser.add_argument(
        "input",
        type=str,
        help="Input mesh file (.obj, .off, .ply, .stl)"
    )

    parser.add_argument(
        "output",
        type=str,
        nargs="?",
        help="Output mesh file (optional if --analyze-only)"
    )

    parser.add_argument(
        "--analyze-only",
        action="store_true",
        help="Only analyze the mesh without filling holes"
    )

    parser.add_argument(
        "--density",
        type=float,
        default=1.0,
        help="Density used to derive mass from volume (default: 1.0)"
    )

    parser.add_argument(
        "--weld-epsilon",
        type=float,
        default=EngineSettings.weld_epsilon,
        help=f"Squared distance under which vertices are welded (default: {EngineSettings.weld_epsilon})"
    )

    parser.add_argument(
        "--no-weld",
        action="store_true",
        help="Do not weld duplicate vertices before looking for holes"
    )

    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip analysis after filling"
    )

    parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Overwrite the output file without asking"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s"
    )

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file does not exist: {input_path}", file=sys.stderr)
        return EXIT_ERROR

    try:
        settings = EngineSettings(weld_epsilon=args.weld_epsilon, weld_before_fill=not args.no_weld)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    # Analyze-only mode
    if args.analyze_only:
        print(f"Analyzing mesh: {input_path}")
        try:
            mesh = load_mesh(input_path)
            result = _drive(analyze(mesh, settings=settings), args.verbose)
            if result is None:
                print("Cancelled.")
                return EXIT_CANCELLED
            print_analysis(result, args.density)
            return EXIT_OK

        except Exception as e:
            print(f"Error during analysis: {e}", file=sys.stderr)
            if args.verbose:
                import traceback
                traceback.print_exc()
            return EXIT_ERROR

    if not args.output:
        print("Error: Output path required (or use --analyze-only)", file=sys.stderr)
        parser.print_help()
        return EXIT_ERROR

    output_path = Path(args.output)
    if output_path.exists() and not args.force:
        response = input(f"Output file exists: {output_path}. Overwrite? [y/N] ")
        if response.lower() not in ['y', 'yes']:
            print("Aborted.")
            return EXIT_OK

    print(f"Filling holes: {input_path}")
    print(f"  Output: {output_path}")

    try:
        mesh = load_mesh(input_path)
        filled = _drive(fill_holes(mesh, settings=settings), args.verbose)
        if filled is None:
            print("Cancelled, nothing written.")
            return EXIT_CANCELLED

        save_mesh(filled.mesh, output_path)

        print("\nSuccess!")
        print(f"  Holes found: {filled.holes_found}")
        print(f"  Holes filled: {filled.holes_filled}")
        if filled.partial_holes:
            print(f"  Partially filled: {filled.partial_holes}")
        print(f"  Faces added: {filled.triangles_added}")
        for issue in filled.issues:
            print(f"    - {issue}")

        if not args.no_validate:
            result = _drive(analyze(filled.mesh, settings=settings), args.verbose)
            if result is None:
                print("Analysis cancelled.")
                return EXIT_CANCELLED
            print("\nAnalysis:")
            print_analysis(result, args.density)

        return EXIT_OK

    except Exception as e:
        print(f"\nError during hole filling: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
