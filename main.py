"""
Feishu Docs MCP server entry point.
"""
import argparse
import logging

from core.config import load_config, setup_logging
from core.server import server
from feishu_docx.docx_tools import register_doc_tools

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Feishu Docs MCP server")
    parser.add_argument("--transport", choices=["stdio", "http"], default="stdio")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3333)
    args = parser.parse_args()

    setup_logging()
    config = load_config()
    tools = register_doc_tools(server, config)
    if not tools:
        logger.info("No Feishu document tools registered; set FEISHU_APP_ID and FEISHU_APP_SECRET")

    if args.transport == "http":
        server.run(transport="http", host=args.host, port=args.port)
    else:
        server.run()


if __name__ == "__main__":
    main()
