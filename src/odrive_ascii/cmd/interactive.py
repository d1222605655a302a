from odrive_ascii.device.odrive import ODrive

import atexit
import logging
import os

# Get a logger specific to this module
logger = logging.getLogger(__name__)

try:
    import readline
    readline_available = True
except ImportError:
    readline_available = False
    logger.warning("readline library not found. History functionality will be disabled.")

import platformdirs

EXIT_COMMANDS = ('!exit', 'exit', 'quit')


def setup_history():
    """Sets up readline history file in a platform-specific user data directory."""
    if not readline_available:
        print("Note: Readline library not available. Command history disabled.")
        return

    data_dir = platformdirs.user_data_dir("odrive-ascii", "odrive-ascii")
    history_file = os.path.join(data_dir, "history")

    try:
        os.makedirs(data_dir, exist_ok=True)
        logger.info(f"Ensured history directory exists: {data_dir}")
    except OSError as e:
        print(f"Warning: Could not create history directory: {str(e)}. History disabled.")
        return

    if os.path.exists(history_file):
        try:
            readline.read_history_file(history_file)
        except OSError as e:
            print(f"Warning: Could not read history file '{history_file}': {str(e)}")

    readline.set_history_length(1000)
    atexit.register(readline.write_history_file, history_file)


def interactive_mode(odrive: ODrive) -> int:
    """
    Run an interactive terminal for talking to the ODrive.

    Each input line is sent verbatim and the reply line (if any arrives before
    the read timeout) is printed.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    setup_history()

    print("Welcome to the odrive terminal.")
    print("Type a line and press enter to send a message.")
    print("Type !exit to exit.")

    while True:
        try:
            cmd_input = input("odrive> ").strip()
            if not cmd_input:
                continue
            if cmd_input.lower() in EXIT_COMMANDS:
                break

            try:
                odrive.send_line(cmd_input)
            except UnicodeEncodeError:
                logger.error(f"Command must be ASCII, not sent: {cmd_input!r}")
                continue
            response = odrive.read_string()
            if response:
                print(response)

        except KeyboardInterrupt:
            print("\nType !exit to exit")
        except EOFError:
            # Handle Ctrl+D
            print()
            break
        except OSError as e:
            logger.error(f"Communication failed: {e}")
            return 1

    return 0
