"""Split long transcripts into bounded chunks on whitespace boundaries."""

from __future__ import annotations


def split_text(text: str, chunk_size: int) -> list[str]:
    """Split *text* into chunks of at most *chunk_size* characters.

    Text no longer than *chunk_size* comes back unchanged as a single chunk.
    Otherwise each cut happens at the last whitespace at or before the limit
    (the whitespace itself is dropped); a run with no whitespace is hard-cut
    at the limit. Empty chunks are never emitted.
    """
    if chunk_size <= 0:
        raise ValueError(f'chunk_size must be positive, got {chunk_size}')
    if len(text) <= chunk_size:
        return [text]

    chunks: list[str] = []
    remaining = text
    while remaining:
        if len(remaining) <= chunk_size:
            chunks.append(remaining)
            break
        window = remaining[: chunk_size + 1]  # a space right at the limit is a clean cut
        cut = _last_whitespace(window)
        if cut is None:
            piece, remaining = remaining[:chunk_size], remaining[chunk_size:]
        else:
            piece, remaining = remaining[:cut], remaining[cut + 1 :]
        if piece:
            chunks.append(piece)
    return chunks


def _last_whitespace(window: str) -> int | None:
    for idx in range(len(window) - 1, -1, -1):
        if window[idx].isspace():
            return idx
    return None
