"""
Constants shared by the sniffer, the renderer and the CLI.

Nothing here is read from the environment; changing a value changes the
behaviour for every caller.
"""

VERSION = "1.0.1"

STDIN_MARKER = "-"

FORMAT_NAMES = ("tsv", "csv", "auto")
DEFAULT_FORMAT = "auto"

# Extension (lowercased, with dot) -> delimiter character
EXTENSION_DELIMITERS = {
    ".tsv": "\t",
    ".csv": ",",
}

# Order in which sniff candidates are scored; ties are never broken by this order.
SNIFF_CANDIDATES = ("\t", ",")

OUTPUT_ENCODING = "utf-8"
# Decoder for streamed UTF-8 sources; a leading BOM is dropped.
STREAM_ENCODING = "utf-8-sig"
# Bytes read ahead of a streamed source to detect its encoding.
ENCODING_SAMPLE_SIZE = 64 * 1024

CLIPBOARD_MIME = "text/html"
CLIPBOARD_COMMAND = ("xclip", "-t", CLIPBOARD_MIME, "-selection", "clipboard", "-i")
