"""
opcli - interactive OPC UA client

Usage:
    python opcli.py                                  # start disconnected
    python opcli.py 192.168.0.10                     # connect to opc.tcp://192.168.0.10:4840
    python opcli.py connect opc.tcp://host:4840/path # connect to an endpoint
"""

import asyncio
import argparse
import signal
import sys
import threading
import logging

from commands import CommandDispatcher
from errors import ExitRequested, OpcliError
from opc_session import DEFAULT_TIMEOUT, ProtocolSession

logger = logging.getLogger(__name__)

PROMPT = "opcli> "


async def read_line(prompt: str) -> str:
    """
    Read one line from stdin without blocking the event loop

    input() runs on a daemon thread, so a read that is still pending when
    the shell is cancelled does not keep the process alive.

    Raises:
        EOFError: At end of input
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def _deliver(line, error):
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(line)

    def _read():
        line, error = None, None
        try:
            line = input(prompt)
        except Exception as e:
            error = e
        try:
            loop.call_soon_threadsafe(_deliver, line, error)
        except RuntimeError:
            # loop already closed
            pass

    threading.Thread(target=_read, daemon=True, name="opcli-input").start()
    return await future


async def run_shell(dispatcher: CommandDispatcher):
    """
    Read and execute commands until exit, end of input or cancellation
    """
    try:
        while True:
            try:
                line = await read_line(PROMPT)
            except EOFError:
                print()
                break

            try:
                await dispatcher.execute(line)
            except ExitRequested:
                break
            except OpcliError as e:
                print(f"Error: {e}", file=sys.stderr)
    finally:
        print("Goodbye!")


def install_sigterm_handler() -> bool:
    """
    Cancel the current task on SIGTERM so cleanup runs as it does for Ctrl+C

    Returns:
        True if the handler was installed (not supported on Windows)
    """
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except NotImplementedError:
        return False
    return True


async def run(argv, timeout: float = DEFAULT_TIMEOUT) -> int:
    """
    Run the client

    Args:
        argv: Startup arguments, program name first
        timeout: Request timeout in seconds

    Returns:
        Process exit status
    """
    print("opcli - OPC UA Interactive Client")
    print("Type 'help' for available commands")
    print()

    handles_sigterm = install_sigterm_handler()
    try:
        async with ProtocolSession(timeout=timeout) as session:
            dispatcher = CommandDispatcher(session)
            try:
                await dispatcher.parse_startup_arguments(argv)
            except OpcliError as e:
                logger.error(f"Failed to connect: {e}")
                return 1

            await run_shell(dispatcher)
            return 0
    finally:
        if handles_sigterm:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGTERM)


def main():
    parser = argparse.ArgumentParser(
        prog="opcli", description="Interactive OPC UA client"
    )
    parser.add_argument(
        "target",
        nargs="*",
        help="Either an IPv4 address or 'connect <endpoint>'",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT})",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    # asyncua is chatty at INFO level
    logging.getLogger("asyncua").setLevel(logging.WARNING)

    try:
        status = asyncio.run(run([parser.prog] + args.target, args.timeout))
    except KeyboardInterrupt:
        status = 130
    except asyncio.CancelledError:
        # SIGTERM
        status = 143
    sys.exit(status)


if __name__ == "__main__":
    main()
