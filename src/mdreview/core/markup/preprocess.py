"""Editor-safe normalization of diff markup"""

from mdreview.core.markup.syntax import scan_spans


DEFAULT_BREAK_TOKEN = "<br>"


def encode_breaks(text: str, break_token: str = DEFAULT_BREAK_TOKEN) -> str:
    return text.replace("\r\n", break_token).replace("\n", break_token)


def decode_breaks(text: str, break_token: str = DEFAULT_BREAK_TOKEN) -> str:
    return text.replace(break_token, "\n")


def preprocess(markup: str, break_token: str = DEFAULT_BREAK_TOKEN) -> str:
    """Replace line breaks inside diff spans (closed or not) with break_token.

    Text outside spans is returned untouched, so a block-aware parser can no
    longer end a span early by starting a new block inside it. Idempotent.
    """
    if "\n" in break_token or "\r" in break_token:
        raise ValueError("break_token must not contain line breaks")
    out = []
    pos = 0
    for span in scan_spans(markup):
        out.append(markup[pos:span.body_start])
        out.append(encode_breaks(markup[span.body_start:span.body_end], break_token))
        pos = span.body_end
    out.append(markup[pos:])
    return "".join(out)
