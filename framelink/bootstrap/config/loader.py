import argparse
import os
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="framelink",
        description=(
            "Frame and unframe length-prefixed packets.\n\n"
            "Each packet is a fixed-width length header followed by the payload,\n"
            "in the style of Erlang's {packet, N}."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "command",
        choices=["pack", "unpack"],
        help=(
            "pack   → read stdin and write it to stdout as a single packet.\n"
            "unpack → read packets from stdin and write their payloads to stdout."
        ),
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a framelink configuration file"
    )

    parser.add_argument(
        "-n", "--head-size",
        type=int,
        choices=[1, 2, 4, 8],
        help="Width of the length header in bytes (overrides the configuration)."
    )

    parser.add_argument(
        "-b", "--byte-order",
        type=str,
        choices=["big", "little"],
        help="Byte order of the length header (overrides the configuration)."
    )

    parser.add_argument(
        "-m", "--max-packet-size",
        type=int,
        help="Largest accepted payload in bytes, 0 for unlimited (overrides the configuration)."
    )

    parser.add_argument(
        "--lines",
        action="store_true",
        help="unpack only: terminate every payload with a newline."
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity, written to stderr."
    )

    return parser


def get_configfile(raw: str | None = None) -> Path | None:
    # Priority: CLI > ENV > default file in current working directory
    raw = raw or os.getenv("FRAMELINKCONFIG")

    if raw is None:
        file = Path.cwd() / "framelink.yaml"
        return file if file.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the FRAMELINKCONFIG environment variable\n"
            "  - Or place a 'framelink.yaml' file in the current working directory."
        )

    return file
