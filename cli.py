#!/usr/bin/env python3
"""
Command-line interface for the sketch-to-website pipeline.
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from webber.config import get_settings
from webber.errors import WebberError
from webber.export.packager import ExportPackager, build_index_html
from webber.io.sketch_canvas import SketchCanvas
from webber.models import DEFAULT_PAGE_TYPE, DEFAULT_USER_PROMPT, GeneratedSite, GenerationRequest
from webber.pipeline.generation import SiteGenerator, new_request_id
from webber.rendering.preview import PreviewRenderer

# Load environment variables
load_dotenv()


def cmd_generate(args):
    """Generate a website from a sketch image."""
    print("🚀 Generating website from sketch...")

    sketch_path = Path(args.sketch)
    if not sketch_path.exists():
        print(f"❌ Error: Sketch not found: {sketch_path}")
        return 1

    settings = get_settings()
    canvas = SketchCanvas.from_image(sketch_path)
    request_id = args.request_id or new_request_id()
    output_dir = Path(args.output) / request_id

    print(f"📁 Request ID: {request_id}")
    print(f"✏️  Sketch: {sketch_path} ({canvas.size[0]}x{canvas.size[1]})")
    print(f"🏷️  Page type: {args.type}")

    if args.save_sketch:
        captured = canvas.save(output_dir / "sketch.png")
        print(f"📸 Captured sketch: {captured}")

    generator = SiteGenerator(
        provider=args.provider or settings.provider,
        model_name=args.model or settings.model_name,
        temperature=args.temperature if args.temperature is not None else settings.temperature,
        max_tokens=args.max_tokens or settings.max_tokens,
        api_key=settings.api_key if not args.provider or args.provider == settings.provider else None,
    )

    print(f"🤖 Using {generator.provider}/{generator.model_name}")

    request = GenerationRequest(
        image=canvas.to_data_url(),
        page_type=args.type,
        user_prompt=args.prompt,
    )

    try:
        site = generator.generate(request, request_id=request_id)
    except WebberError as e:
        print(f"❌ Generation failed: {e.message}")
        if e.raw is not None:
            print(f"📄 Raw response:\n{e.raw}")
        return 1

    output_dir.mkdir(parents=True, exist_ok=True)
    site_path = output_dir / "site.json"
    site_path.write_text(json.dumps(site.model_dump(), indent=2), encoding="utf-8")
    (output_dir / "index.html").write_text(build_index_html(site), encoding="utf-8")

    archive_path = ExportPackager(args.output).write(site, subdir=request_id)

    print("✅ Website generated successfully!")
    print(f"📄 Site JSON: {site_path}")
    print(f"📦 Export: {archive_path}")

    if args.screenshot:
        print("\n📸 Rendering preview screenshot...")
        renderer = PreviewRenderer(headless=True)
        screenshot_path = renderer.screenshot(
            site,
            output_dir / "preview.png",
            width=canvas.size[0],
            height=canvas.size[1],
            wait_time=args.render_wait,
        )
        print(f"✅ Screenshot saved: {screenshot_path}")

    return 0


def cmd_draw(args):
    """Replay recorded strokes onto a blank canvas."""
    print("✏️  Replaying strokes...")

    strokes_path = Path(args.strokes)
    if not strokes_path.exists():
        print(f"❌ Error: Strokes file not found: {strokes_path}")
        return 1

    strokes = json.loads(strokes_path.read_text(encoding="utf-8"))
    if isinstance(strokes, dict):
        strokes = strokes.get("strokes", [])

    settings = get_settings()
    canvas = SketchCanvas(settings.canvas)
    canvas.replay(strokes)
    output_path = canvas.save(args.output)

    print(f"✅ {len(strokes)} strokes drawn")
    print(f"🖼️  Sketch: {output_path}")
    return 0


def cmd_package(args):
    """Package a saved site JSON into a zip export."""
    print("📦 Packaging website...")

    site_path = Path(args.site)
    if not site_path.exists():
        print(f"❌ Error: Site file not found: {site_path}")
        return 1

    site = GeneratedSite.model_validate_json(site_path.read_text(encoding="utf-8"))
    archive_path = ExportPackager(args.output).write(site, filename=args.filename)

    print(f"✅ Export: {archive_path}")
    return 0


def cmd_serve(args):
    """Run the generation API."""
    import uvicorn

    print(f"🌐 Serving on http://{args.host}:{args.port}")
    uvicorn.run("webber.api.server:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Sketch-to-Website Generation",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate command
    gen_parser = subparsers.add_parser("generate", help="Generate a website from a sketch")
    gen_parser.add_argument("--sketch", "-s", required=True, help="Path to sketch image")
    gen_parser.add_argument("--type", "-t", default=DEFAULT_PAGE_TYPE, help="Page type label")
    gen_parser.add_argument("--prompt", default=DEFAULT_USER_PROMPT, help="Additional instruction")
    gen_parser.add_argument("--output", "-o", default="outputs", help="Output directory")
    gen_parser.add_argument("--request-id", help="Request identifier (default: timestamped)")
    gen_parser.add_argument("--provider", "-p", choices=["openai", "anthropic"])
    gen_parser.add_argument("--model", help="Model name (default: provider default)")
    gen_parser.add_argument("--temperature", type=float, help="Generation temperature")
    gen_parser.add_argument("--max-tokens", type=int, help="Maximum tokens")
    gen_parser.add_argument("--save-sketch", action="store_true", help="Save the image sent to the model")
    gen_parser.add_argument("--screenshot", action="store_true", help="Capture a preview screenshot")
    gen_parser.add_argument("--render-wait", type=int, default=1000, help="Render wait time (ms)")

    # Draw command
    draw_parser = subparsers.add_parser("draw", help="Replay recorded strokes into a sketch")
    draw_parser.add_argument("--strokes", required=True, help="JSON file of strokes")
    draw_parser.add_argument("--output", "-o", required=True, help="Output PNG path")

    # Package command
    pkg_parser = subparsers.add_parser("package", help="Package a site JSON into a zip")
    pkg_parser.add_argument("--site", required=True, help="Path to {html, css, js} JSON")
    pkg_parser.add_argument("--output", "-o", default="outputs", help="Output directory")
    pkg_parser.add_argument("--filename", default="webber-site.zip", help="Archive file name")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the generation API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "generate":
            return cmd_generate(args)
        elif args.command == "draw":
            return cmd_draw(args)
        elif args.command == "package":
            return cmd_package(args)
        elif args.command == "serve":
            return cmd_serve(args)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        return 130
    except Exception as e:
        print(f"\n❌ Error: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
