"""Placeholder transcript text for completed uploads."""

import random

STOCK_SENTENCES = (
    "Hello and welcome to this recording.",
    "Today we'll be discussing some important topics.",
    "Let me start by introducing the main points.",
    "First, we need to consider the background.",
    "The key insight here is quite interesting.",
    "Moving on to the next section.",
    "This brings us to our conclusion.",
    "Thank you for listening.",
)


def generate_transcript(rng: random.Random, min_sentences: int = 3, max_sentences: int = 7) -> str:
    """Join a prefix of the stock sentences; its length is uniform in [min_sentences, max_sentences]."""
    count = min(rng.randint(min_sentences, max_sentences), len(STOCK_SENTENCES))
    return " ".join(STOCK_SENTENCES[:count])
