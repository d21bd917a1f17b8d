#!/usr/bin/env python3
"""
Google Docs MCP Server

Usage:
    python main.py                                # stdio transport
    python main.py --transport streamable-http    # HTTP transport on HOST:PORT
"""
import argparse
import logging
import sys

from core import config

# Suppress googleapiclient discovery cache warning
logging.getLogger('googleapiclient.discovery_cache').setLevel(logging.ERROR)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Google Docs MCP server")
    parser.add_argument('--transport', choices=['stdio', 'streamable-http'],
                        default=config.get_transport_mode(),
                        help='Transport to serve on (default: MCP_TRANSPORT or stdio)')
    parser.add_argument('--host', default=config.HOST, help='Bind address for HTTP transport')
    parser.add_argument('--port', type=int, default=config.PORT, help='Port for HTTP transport')
    args = parser.parse_args()

    from core.clients import CredentialsUnavailableError, build_client_set
    from core.comments import create_comment_tools
    from core.server import server, set_transport_mode
    from gdocs.docs_tools import create_docs_tools

    set_transport_mode(args.transport)

    try:
        clients = build_client_set()
    except CredentialsUnavailableError as e:
        logger.error(str(e))
        sys.exit(1)

    docs_tools = create_docs_tools(server, clients)
    comment_tools = create_comment_tools(server, clients)
    logger.info(f"Registered {len(docs_tools) + len(comment_tools)} tools")

    if args.transport == 'streamable-http':
        logger.info(f"Serving on http://{args.host}:{args.port}")
        server.run(transport='streamable-http', host=args.host, port=args.port)
    else:
        server.run()


if __name__ == "__main__":
    main()
