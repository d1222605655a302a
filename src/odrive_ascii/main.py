"""
ODrive ASCII CLI Tool

A command-line tool for commanding and querying ODrive motor controllers
over the ASCII protocol.
"""

import argparse
import logging
import sys
from typing import List, Optional

from odrive_ascii.cmd.config import config_get_all
from odrive_ascii.cmd.interactive import interactive_mode
from odrive_ascii.device.conn import Connection
from odrive_ascii.device.odrive import ODrive
from odrive_ascii.enumerations import Axis, parse_axis_state
from odrive_ascii.streams.usb import DEFAULT_BAUDRATE, USBStream


def axis_arg(value: str) -> Axis:
    try:
        return Axis(int(value))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid axis: {value!r} (expected 0 or 1)") from None


def state_arg(value: str):
    try:
        return parse_axis_state(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='odrive-ascii',
        description='ODrive ASCII CLI Tool',
        epilog="""A tool for commanding ODrive motor controllers over a serial link."""
    )

    # Global options (apply to all subcommands)
    parser.add_argument('--device', '-d', default=None,
                        help='Serial port of the ODrive (default: auto-detect)')
    parser.add_argument('--baud', type=int, default=DEFAULT_BAUDRATE,
                        help=f'Baud rate (default: {DEFAULT_BAUDRATE})')
    # Logging / Output options (Mutually Exclusive)
    log_level_group = parser.add_mutually_exclusive_group()
    log_level_group.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose DEBUG level logging')
    log_level_group.add_argument('--quiet', '-q', action='store_true',
                        help='Suppress INFO level logging, show only WARNINGs and ERRORs')

    subparsers = parser.add_subparsers(dest='action', title='Actions',
                                     description='Choose an action to perform', required=True)

    subparsers.add_parser('scan', help='List serial ports and exit')

    parser_command = subparsers.add_parser('command', help='Send a single raw command line and print the reply')
    parser_command.add_argument('device_command', help='The command string to send, e.g. "r vbus_voltage"')

    parser_velocity = subparsers.add_parser('velocity', help='Print the encoder velocity estimate of an axis')
    parser_velocity.add_argument('--axis', '-a', type=axis_arg, default=Axis.ZERO)

    parser_state = subparsers.add_parser('state', help='Request an axis state')
    parser_state.add_argument('state', type=state_arg,
                              help='State name or number, e.g. full-calibration-sequence or 3')
    parser_state.add_argument('--axis', '-a', type=axis_arg, default=Axis.ZERO)
    parser_state.add_argument('--no-wait', action='store_true',
                              help='Do not wait for the axis to return to idle')

    parser_errors = subparsers.add_parser('errors', help='Print the error registers of an axis')
    parser_errors.add_argument('--axis', '-a', type=axis_arg, default=Axis.ZERO)

    parser_config = subparsers.add_parser('config', help='Display common axis configuration properties')
    parser_config.add_argument('--axis', '-a', type=axis_arg, default=Axis.ZERO)
    parser_config.add_argument('--output', '-o',
                       help='Save configuration to a specified file')

    subparsers.add_parser('interactive', aliases=['i'], help='Enter interactive terminal mode')

    return parser


def scan(log: logging.Logger) -> int:
    ports = USBStream.list_ports()
    if not ports:
        log.info("No serial ports found")
        return 0
    for port in ports:
        marker = "*" if USBStream.is_odrive_port(port) else " "
        print(f"{marker} {port['port']:<20} {port['description']} [{port['hwid']}]")
    return 0


def run_action(args: argparse.Namespace, odrive: ODrive, log: logging.Logger) -> int:
    if args.action == 'command':
        log.info(f"Executing command: {args.device_command}")
        odrive.send_line(args.device_command)
        response = odrive.read_string()
        if response:
            print(response)
        return 0

    if args.action == 'velocity':
        print(odrive.get_velocity(args.axis))
        return 0

    if args.action == 'state':
        log.info(f"Requesting {args.state.name} on axis{int(args.axis)}")
        reached = odrive.run_state(args.axis, args.state, wait=not args.no_wait)
        if not reached:
            log.error("Timed out waiting for the axis to return to idle")
            return 1
        return 0

    if args.action == 'errors':
        errors = odrive.get_errors(args.axis)
        if errors.ok:
            print(f"axis{int(args.axis)}: no errors")
        else:
            for name in errors.describe():
                print(name)
        return 0

    if args.action == 'config':
        return config_get_all(odrive, args.axis, args.output)

    if args.action in ('interactive', 'i'):
        return interactive_mode(odrive)

    log.error(f"Unknown action: {args.action}")
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Set up logging level based on flags
    log_level = logging.INFO
    if args.verbose:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.WARNING

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    log = logging.getLogger("main")

    # Scan doesn't need a connection
    if args.action == 'scan':
        return scan(log)

    if args.device:
        stream = Connection.usb(args.device, baudrate=args.baud)
    else:
        log.info("No device specified, attempting auto-detect...")
        stream, _ = Connection.auto(baudrate=args.baud)
    if stream is None:
        log.error("Failed to connect to device")
        return 1

    odrive = ODrive(stream)
    exit_code = 1
    try:
        exit_code = run_action(args, odrive, log)
    except KeyboardInterrupt:
        log.warning("Operation cancelled by user")
        exit_code = 1
    except OSError as e:
        log.error(f"Communication with the device failed: {e}")
        exit_code = 1
    except Exception as e:
        log.error(f"An unexpected error occurred: {str(e)}")
        log.exception("Exception details:")
        exit_code = 1
    finally:
        odrive.close()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
