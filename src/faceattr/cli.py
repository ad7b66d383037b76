"""CLI for faceattr: ``faceattr analyze`` and ``faceattr info``."""

import argparse
import json
import logging
import sys

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="faceattr",
        description="Age, gender and expression estimation for a photo",
    )
    sub = parser.add_subparsers(dest="command")

    # faceattr analyze
    analyze_p = sub.add_parser("analyze", help="Analyze one image")
    analyze_p.add_argument("image", help="Path to the input image")
    analyze_p.add_argument(
        "--detections", "-d",
        default=None,
        help="JSON/YAML file with precomputed face detections (skips InsightFace)",
    )
    _add_common_args(analyze_p)
    analyze_p.add_argument(
        "-o", "--output",
        default=None,
        help="Write the annotated image to this path",
    )
    analyze_p.add_argument(
        "--json",
        default=None,
        metavar="PATH",
        help="Write a JSON report to PATH ('-' for stdout)",
    )
    analyze_p.add_argument(
        "--sequential",
        action="store_true",
        help="Run the two models one after the other",
    )
    analyze_p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    # faceattr info
    info_p = sub.add_parser("info", help="Show configuration and model locations")
    _add_common_args(info_p)
    info_p.add_argument(
        "--steps",
        action="store_true",
        help="Show the pipeline processing steps",
    )

    return parser


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", "-c", default=None, help="Pipeline config YAML file")
    parser.add_argument("--models-dir", default=None, help="Directory holding the ONNX models")
    parser.add_argument("--device", default=None, help="Inference device (cpu, cuda:0)")


def _load_config(args: argparse.Namespace):
    """Build a PipelineConfig from --config plus command-line overrides."""
    from faceattr.config import DetectorConfig, PipelineConfig

    if args.config:
        config = PipelineConfig.from_yaml(args.config)
    else:
        config = PipelineConfig()

    if args.models_dir:
        config.models_dir = args.models_dir
    if args.device:
        config.device = args.device
    if getattr(args, "sequential", False):
        config.parallel = False
    if getattr(args, "detections", None):
        config.detector = DetectorConfig(name="static", kwargs={"faces": args.detections})
    return config


def _quiet_onnxruntime() -> None:
    try:
        import onnxruntime as ort
    except ImportError:
        return
    ort.set_default_logger_severity(3)


def _cmd_analyze(args: argparse.Namespace) -> int:
    """Handle ``faceattr analyze``."""
    import cv2

    from faceattr.errors import ModelLoadError
    from faceattr.pipeline import AttributePipeline, PipelineState

    image = cv2.imread(args.image, cv2.IMREAD_COLOR)
    if image is None:
        print(f"Error: cannot read image {args.image}", file=sys.stderr)
        return EXIT_ERROR

    try:
        config = _load_config(args)
    except (OSError, TypeError, ValueError) as e:
        print(f"Error: invalid config: {e}", file=sys.stderr)
        return EXIT_ERROR

    _quiet_onnxruntime()
    try:
        pipeline = AttributePipeline.from_config(config)
    except (ModelLoadError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        result = pipeline.analyze(image)
    finally:
        pipeline.cleanup()

    age_gender_text, expression_text = result.texts
    print(age_gender_text)
    if expression_text:
        print(expression_text)

    if args.output:
        annotated = result.annotated if result.annotated is not None else image
        if not cv2.imwrite(args.output, annotated):
            print(f"Error: cannot write {args.output}", file=sys.stderr)
            return EXIT_ERROR
        logger.info("Annotated image saved to %s", args.output)

    if args.json:
        report = json.dumps(result.to_dict(), indent=2)
        if args.json == "-":
            print(report)
        else:
            with open(args.json, "w", encoding="utf-8") as f:
                f.write(report)

    if result.state is PipelineState.FAILED:
        return EXIT_FAILED
    return EXIT_OK


def _cmd_info(args: argparse.Namespace) -> int:
    """Handle ``faceattr info``."""
    from faceattr.paths import get_models_dir

    try:
        config = _load_config(args)
    except (OSError, TypeError, ValueError) as e:
        print(f"Error: invalid config: {e}", file=sys.stderr)
        return EXIT_ERROR

    models_dir = config.models_path or get_models_dir()
    print(f"Models dir: {models_dir}")
    for label, filename in (
        ("age/gender", config.agender_model),
        ("expression", config.expression_model),
    ):
        present = "found" if (models_dir / filename).exists() else "missing"
        print(f"  {label:12s} {filename} [{present}]")
    print(f"Device:   {config.device}")
    print(f"Parallel: {config.parallel}")
    print(f"Detector: {config.detector.name}")

    if args.steps:
        from faceattr.pipeline import AttributePipeline
        from faceattr.steps import get_processing_steps

        print("Steps:")
        for step in get_processing_steps(AttributePipeline):
            print(f"  {step}")
    return EXIT_OK


def main(argv=None) -> int:
    """Entry point for ``faceattr`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    level = logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "analyze":
        return _cmd_analyze(args)
    if args.command == "info":
        return _cmd_info(args)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
