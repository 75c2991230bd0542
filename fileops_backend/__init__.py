"""Backend for the file operation tools.

This package keeps the tool layer (tools.py) and the CLI thin:
- recursive walks + size accounting (walker)
- page range mini-language (ranges)
- ZIP/TAR archive creation and extraction with format dispatch
- pass-through file, image and PDF operations

Every operation returns an OperationResult; report.py turns it into text and
tools.call_tool converts failures into error results.
"""
