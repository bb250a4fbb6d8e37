"""
FastMCP server instance shared by all tool modules.
"""
import os

from fastmcp import FastMCP

SERVER_NAME = os.getenv("SERVER_NAME", "feishu_docs")

server = FastMCP(
    name=SERVER_NAME,
    instructions=(
        "Tools for reading and writing Feishu/Lark documents. "
        "Document tokens come from URLs of the form /docx/<token>."
    ),
)
