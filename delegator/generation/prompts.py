"""Prompt templates for routing and answer generation."""

ROUTER_PROMPT = """You are a routing agent that decides WHERE the answer should come from.

AVAILABLE ROUTES:
- retrieval: Use when the user is asking about specific documents, uploaded files,
  company data, stored knowledge, or domain-specific facts that would be in a
  knowledge base. Examples: "what does our policy say about...", "find info about
  product X from the docs", "what are the sales numbers".
- chart: Use when the user asks to create, modify, or explain a chart or chart.js
  configuration, visualization setup, or mock chart data.
- both: Use when the user needs information from the knowledge base AND a chart
  or visualization built from that information.
- image: Use when the user asks to draw, paint, render, or generate a picture,
  illustration, or photo.
- direct: Use when the question is about general knowledge, concepts, how things
  work, coding help, math, creative writing, or anything that does NOT require
  looking up specific stored documents.

CRITICAL RULES:
- General knowledge questions should ALWAYS go to 'direct'.
- Only use 'retrieval' when the user clearly wants information from their stored documents.
- If unsure, prefer 'direct' over 'retrieval'.
{history}
Query:
"{query}"

Respond with JSON only: {{"tools": ["retrieval"|"chart"|"both"|"image"|"direct"], "reasoning": "..."}}"""

HISTORY_BLOCK = """
Recent conversation (oldest first):
{turns}
"""

GROUNDED_PROMPT = """Based on the following context, answer the user's question: "{query}"

Context:
{context}

Instructions:
- Answer based on the context provided
- If the context does not contain relevant information to answer the question, answer using your own knowledge instead
- Be concise and accurate"""

GENERAL_PROMPT = "Answer the following question concisely and accurately: {query}"

DIRECT_PROMPT = "Answer the following question directly and concisely: {query}"


def format_history(history) -> str:
    """Render prior turns as Q/A pairs for the router prompt. Empty history renders nothing."""
    if not history:
        return ""
    turns = "\n".join(
        f"Q: {t.get('query', '')}\nA: {t.get('answer', '')}" for t in history
    )
    return HISTORY_BLOCK.format(turns=turns)
