"""
Local OPC UA server for trying out opcli
"""

import asyncio
import argparse
from datetime import datetime
from asyncua import Server
import logging

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Suppress INFO messages from asyncua about namespace 0 nodes (standard OPC UA nodes)
asyncua_logger = logging.getLogger("asyncua")
asyncua_logger.setLevel(logging.WARNING)

PRODUCT_NAME = "opcli Test Server"
MANUFACTURER_NAME = "opcli"
SOFTWARE_VERSION = "1.0.0"


async def create_test_server(port: int = 4840) -> Server:
    """
    Create an initialized, not yet started, test server with known build info

    Args:
        port: Port to listen on

    Returns:
        asyncua Server; start it with ``async with server``
    """
    server = Server()
    await server.init()

    server.set_endpoint(f"opc.tcp://0.0.0.0:{port}/opcli/server/")
    server.set_server_name(PRODUCT_NAME)
    await server.set_build_info(
        "urn:opcli:test-server",
        MANUFACTURER_NAME,
        PRODUCT_NAME,
        SOFTWARE_VERSION,
        "1",
        datetime.now(),
    )

    idx = await server.register_namespace("urn:opcli:test")
    objects = server.get_objects_node()
    folder = await objects.add_folder(idx, "TestFolder")
    await folder.add_variable(idx, "TestInt", 42)
    await folder.add_variable(idx, "TestString", "Hello OPC UA")
    await folder.add_variable(idx, "EmptyString", "")
    return server


async def serve(port: int):
    server = await create_test_server(port)
    async with server:
        logger.info(f"Test OPC UA server started on port {port}")
        logger.info(f"Server endpoint: opc.tcp://localhost:{port}/opcli/server/")
        logger.info("Press Ctrl+C to stop the server")
        while True:
            await asyncio.sleep(1)


def main():
    parser = argparse.ArgumentParser(description="Run a test OPC UA server")
    parser.add_argument(
        "--port",
        type=int,
        default=4840,
        help="Port to run the server on (default: 4840)",
    )

    args = parser.parse_args()

    try:
        asyncio.run(serve(args.port))
    except KeyboardInterrupt:
        logger.info("Server stopped")


if __name__ == "__main__":
    main()
