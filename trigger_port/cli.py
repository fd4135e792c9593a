#!/usr/bin/env python3

"""CLI tool to list USB serial devices and send bytes to a trigger box"""

import argparse
import logging
import ok_logging_setup
import pathlib

import trigger_port

ok_logging_setup.skip_traceback_for(trigger_port.SerialOpenException)
ok_logging_setup.skip_traceback_for(trigger_port.SerialConfigInvalid)

# verbosity 0 is silent except fatal errors
LOG_LEVELS = {0: "critical", 1: "warning", 2: "info", 3: "debug"}


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="more messages (repeat up to -vv to echo OS commands)",
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="only fatal errors"
    )
    subparsers = parser.add_subparsers(title="actions", dest="command")
    list_parser = subparsers.add_parser("list", help="List USB serial ports")
    list_parser.add_argument(
        "--name", "-n", action="store_true", help="print device file only"
    )

    send_parser = subparsers.add_parser("send", help="Send trigger bytes")
    send_parser.add_argument(
        "byte", nargs="+", type=byte_value, help="byte value (0-255, 0x..)"
    )
    send_parser.add_argument(
        "--port-file", "-p", type=pathlib.Path, help="file naming the port"
    )
    send_parser.add_argument(
        "--baud", "-b", type=int, default=9600, help="baud rate"
    )

    args = parser.parse_args()
    if not args.command:
        args = parser.parse_args(["list"])

    verbosity = 0 if args.quiet else min(3, 1 + args.verbose)
    ok_logging_setup.install({"OK_LOGGING_LEVEL": LOG_LEVELS[verbosity]})

    if args.command == "list":
        found = trigger_port.list_ports(verbosity)
        if not found:
            ok_logging_setup.exit("❌ No serial ports found")

        for port in found:
            print(port.port_name if args.name else format_line(port))

    if args.command == "send":
        opts = trigger_port.TriggerOptions(baud=args.baud, verbosity=verbosity)
        data = bytes(args.byte)
        with trigger_port.TriggerPort(args.port_file, opts) as port:
            port.write(data)
            logging.info("📤 Sent %s to %s", data.hex(" "), port.port_name)


def byte_value(text: str) -> int:
    value = int(text, 0)
    if not 0 <= value <= 255:
        raise argparse.ArgumentTypeError(f"{text!r} is not a byte (0-255)")
    return value


def format_line(port: trigger_port.PortEntry) -> str:
    return f"{port.identifier or '?'} {port.port_name}"


if __name__ == "__main__":
    main()
