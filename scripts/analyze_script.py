#!/usr/bin/env python3
"""Segment a screenplay text file and print the emotion of every scene.

Usage:
    python scripts/analyze_script.py path/to/script.txt [--language de] [--json]
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import get_settings
from core.exceptions import SceneMoodException
from core.logging_config import configure_logging
from core.models import ScriptDialect
from services.pipeline import ScenePipeline


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify the scenes of a screenplay")
    parser.add_argument("path", type=Path, help="Plain-text screenplay")
    parser.add_argument("--language", help="ISO 639-1 language hint")
    parser.add_argument(
        "--format",
        choices=[d.value for d in ScriptDialect],
        help="Screenplay dialect hint",
    )
    parser.add_argument("--timeout", type=float, help="Overall deadline in seconds")
    parser.add_argument("--json", action="store_true", help="Print the analysis as JSON")
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    settings = get_settings()
    configure_logging(settings)

    text = args.path.read_text(encoding="utf-8")
    pipeline = ScenePipeline(settings)

    try:
        analysis = await pipeline.analyze(
            text,
            language_hint=args.language,
            format_hint=ScriptDialect(args.format) if args.format else None,
            timeout=args.timeout,
        )
    except SceneMoodException as e:
        print(f"❌ {e.message}")
        sys.exit(1)

    if args.json:
        print(analysis.model_dump_json(indent=2))
        return

    detection = analysis.language
    print(f"📄 {args.path.name}")
    print(
        f"🌐 {detection.name} ({detection.language.value}, {detection.method}, "
        f"confidence {detection.confidence:.2f}), format: {detection.format.value}"
    )
    print(f"✂️  {analysis.total_scenes} scenes via {analysis.segmentation_source}")
    print("=" * 60)

    for scene in analysis.scenes:
        marker = " ⚠️ local" if scene.fallback_used else ""
        print(f"{scene.scene_number:>3}. {scene.emotion.value:<11} {scene.confidence:.2f}  {scene.header[:45]}{marker}")

    for warning in analysis.warnings:
        print(f"\n⚠️  {warning}")


if __name__ == "__main__":
    asyncio.run(main())
