import logging
import sys
from typing import BinaryIO, Sequence

from framelink.bootstrap.config.loader import build_parser, get_configfile
from framelink.bootstrap.config.settings import load_settings
from framelink.core.buffer import Buffer
from framelink.core.helpers.utils import setup_logging
from framelink.core.models.message import BytesMessage
from framelink.core.protocol.errors import EndOfStream, FramingError
from framelink.core.protocol.simple import SimpleProtocol

logger = logging.getLogger("bootstrap.cli")


def pack(protocol: SimpleProtocol, stdin: BinaryIO, stdout: BinaryIO) -> int:
    buffer = Buffer()
    protocol.packet(buffer, BytesMessage(stdin.read()))
    protocol.write(stdout, buffer)
    size = len(buffer) - protocol.head_size
    logger.info(f"Packed {size} bytes")
    return size


def unpack(protocol: SimpleProtocol, stdin: BinaryIO, stdout: BinaryIO, lines: bool = False) -> int:
    buffer = Buffer()
    count = 0
    while True:
        try:
            protocol.read(stdin, buffer)
        except EndOfStream:
            break
        stdout.write(buffer.view())
        if lines:
            stdout.write(b"\n")
        count += 1
    logger.info(f"Unpacked {count} packet(s)")
    return count


def main(
    argv: Sequence[str] | None = None,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    settings = load_settings(
        get_configfile(args.config),
        head_size=args.head_size,
        byte_order=args.byte_order,
        max_packet_size=args.max_packet_size,
    )
    protocol = settings.to_config().build()
    logger.debug(f"Using {protocol!r}")

    stdin = stdin or sys.stdin.buffer
    stdout = stdout or sys.stdout.buffer

    try:
        if args.command == "pack":
            pack(protocol, stdin, stdout)
        else:
            unpack(protocol, stdin, stdout, lines=args.lines)
    except FramingError as ex:
        print(f"framelink: {ex}", file=sys.stderr)
        return 1
    finally:
        stdout.flush()

    return 0


if __name__ == "__main__":
    sys.exit(main())
