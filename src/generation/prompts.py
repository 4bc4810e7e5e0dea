"""Prompt templates for event question answering."""

ANSWER_INSTRUCTIONS = """Instructions:
- Answer in at most 2-3 sentences.
- Cite every factual claim with the number of the source it comes from, e.g. [1].
- When a claim is supported by several sources, put the markers next to each other, e.g. [1][3].
- Use only the source numbers given above. Do not invent sources.
- If the sources do not contain enough information, say so."""

ANSWER_PROMPT = """You are an assistant answering questions about a disaster event using news sources.

Sources:
{sources}

Question: {query}

""" + ANSWER_INSTRUCTIONS
