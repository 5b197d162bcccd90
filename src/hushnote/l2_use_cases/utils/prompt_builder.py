"""Pure functions and fixed instructions for summarization prompts."""

from __future__ import annotations

CHUNK_INSTRUCTIONS = (
    'You are a concise summarizer. Given a portion of a spoken audio transcript, '
    'produce a short summary of 2-4 sentences capturing the key points. '
    'Respond only with the summary text, no preamble.'
)

MERGE_INSTRUCTIONS = (
    'You are a concise summarizer. You will receive several partial summaries of a '
    'spoken audio transcript. Combine them into a single cohesive summary of 3-5 sentences. '
    'Respond only with the final summary text, no preamble.'
)


def build_chunk_prompt(chunk: str) -> str:
    """Build the user prompt for summarizing one transcript chunk."""
    return f'Summarize the following transcript excerpt:\n\n{chunk}'


def build_merge_prompt(summaries: list[str]) -> str:
    """Build the user prompt that merges partial summaries, numbered in order."""
    parts = '\n\n'.join(f'Part {i}:\n{summary}' for i, summary in enumerate(summaries, start=1))
    return f'Combine these {len(summaries)} partial summaries into one:\n\n{parts}'
