#!/usr/bin/env python3
"""
Dev helper: send a test verification submission to the local backend.

Builds a POST /verify payload with generated sample images (or real image
files) and prints the response. Every message ends up in the chat
configured by TELEGRAM_CHAT_ID on the target server.

Usage
-----
# Basic: 4 front + 4 back generated PNGs, targeting localhost:3000
python scripts/send_test_verification.py

# Send real photos for the front camera, none for the back camera
python scripts/send_test_verification.py --front a.jpg b.jpg --back-count 0

# Send a job application instead
python scripts/send_test_verification.py --application

# Print the payload without sending it
python scripts/send_test_verification.py --dry-run
"""

import argparse
import base64
import json
import struct
import sys
import textwrap
import zlib
from pathlib import Path

import httpx


# ---------------------------------------------------------------------------
# Sample image generator
# ---------------------------------------------------------------------------

def _png_chunk(kind: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(kind + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)


def _make_sample_png(shade: int) -> bytes:
    """Return a 16x16 single-colour greyscale PNG."""
    width = height = 16
    raw = b"".join(b"\x00" + bytes([shade]) * width for _ in range(height))
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", struct.pack(">IIBBBBB", width, height, 8, 0, 0, 0, 0))
        + _png_chunk(b"IDAT", zlib.compress(raw))
        + _png_chunk(b"IEND", b"")
    )


_MIME_BY_SUFFIX = {
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".png": "png",
    ".webp": "webp",
    ".gif": "gif",
}


def _to_data_uri(content: bytes, subtype: str = "png") -> str:
    return f"data:image/{subtype};base64,{base64.b64encode(content).decode()}"


def _load_images(paths: list[str] | None, count: int, shade_offset: int) -> list[str]:
    if paths:
        uris = []
        for raw in paths:
            path = Path(raw)
            subtype = _MIME_BY_SUFFIX.get(path.suffix.lower(), "jpeg")
            uris.append(_to_data_uri(path.read_bytes(), subtype))
        return uris
    return [_to_data_uri(_make_sample_png((shade_offset + 40 * i) % 256)) for i in range(count)]


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------

def _build_verification_payload(front: list[str], back: list[str]) -> dict:
    return {
        "deviceInfo": {
            "model": "Test Device",
            "os": "TestOS 1.0",
            "battery": {"level": 0.85, "charging": False},
        },
        "location": {"latitude": 51.5074, "longitude": -0.1278, "accuracy": 12},
        "frontImages": front,
        "backImages": back,
    }


def _build_application_payload() -> dict:
    return {
        "name": "Test Applicant",
        "job": "Video Editing",
        "whatsapp": "+15551234567",
        "details": "Sent by send_test_verification.py to exercise the form relay.",
    }


def _summarise(payload: dict) -> dict:
    """Replace base64 blobs with their sizes for printing."""
    display = dict(payload)
    for key in ("frontImages", "backImages"):
        if key in display:
            display[key] = [f"<data-uri, {len(uri)} chars>" for uri in display[key]]
    return display


def _print_response(response: httpx.Response) -> None:
    status = response.status_code
    symbol = "OK" if status == 200 else "FAIL"
    print(f"\n[{symbol}] HTTP {status}")
    try:
        print(json.dumps(response.json(), indent=2, ensure_ascii=False))
    except ValueError:
        print(response.text)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> int:
    parser = argparse.ArgumentParser(
        prog="send_test_verification.py",
        description="Send a test submission to the verification relay backend.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Examples:
              python scripts/send_test_verification.py
              python scripts/send_test_verification.py --front a.jpg --back-count 0
              python scripts/send_test_verification.py --application
              python scripts/send_test_verification.py --url http://localhost:8080
        """),
    )
    parser.add_argument(
        "--url",
        default="http://localhost:3000",
        help="Backend base URL (default: http://localhost:3000)",
    )
    parser.add_argument("--front", nargs="*", metavar="PATH", help="Front camera image files")
    parser.add_argument("--back", nargs="*", metavar="PATH", help="Back camera image files")
    parser.add_argument(
        "--front-count", type=int, default=4,
        help="Generated front images when --front is not given (default: 4)",
    )
    parser.add_argument(
        "--back-count", type=int, default=4,
        help="Generated back images when --back is not given (default: 4)",
    )
    parser.add_argument(
        "--application",
        action="store_true",
        help="Send a job application to /submit-application instead.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the payload JSON without sending it.",
    )
    args = parser.parse_args()

    if args.application:
        endpoint = f"{args.url.rstrip('/')}/submit-application"
        payload = _build_application_payload()
    else:
        endpoint = f"{args.url.rstrip('/')}/verify"
        try:
            front = _load_images(args.front, args.front_count, shade_offset=0)
            back = _load_images(args.back, args.back_count, shade_offset=128)
        except OSError as exc:
            print(f"ERROR: Could not read image: {exc}", file=sys.stderr)
            return 1
        payload = _build_verification_payload(front, back)
        print(f"Front images: {len(front)}  Back images: {len(back)}")

    print(f"Endpoint    : {endpoint}")

    if args.dry_run:
        print("\n[DRY RUN] Payload:")
        print(json.dumps(_summarise(payload), indent=2))
        return 0

    try:
        # Image sends are throttled server-side; allow for retries and delays.
        response = httpx.post(endpoint, json=payload, timeout=120)
    except httpx.ConnectError:
        print(
            f"\nERROR: Could not connect to {endpoint}\n"
            "Is the backend running? Start it with:\n"
            "  verification-relay   (or: uvicorn app.main:app --app-dir backend --port 3000)",
            file=sys.stderr,
        )
        return 1
    except httpx.HTTPError as exc:
        print(f"\nERROR: {exc}", file=sys.stderr)
        return 1

    _print_response(response)
    return 0 if response.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
